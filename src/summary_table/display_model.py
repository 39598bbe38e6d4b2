"""
Display model computation

``compute_display_model`` runs the whole pipeline (resolve settings, build
the query plan, merge provider results, order rows and compute merged
cells) as one pure function of its inputs. The rendering layer calls it
whenever the dataset, the settings or the provider change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .dataset import Column, Dataset
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog
from .grouping_manager import DEFAULT_MAX_LEVELS, GroupingManager, MergeDescriptor
from .logging import get_logger
from .query_plan import QueryPlan, build_plan
from .result_provider import DatasetResultProvider, ResultProvider
from .row_merger import merge
from .settings import SummaryTableSettings
from .settings_resolver import ResolvedColumns, resolve

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class DisplayRow:
    """One rendered row: cells, tags and the span of each group cell."""

    cells: tuple[Any, ...]
    grouping_level: int
    is_subtotal: bool
    spans: dict[int, MergeDescriptor] = field(default_factory=dict)

    @property
    def is_grand_total(self) -> bool:
        return self.is_subtotal and self.grouping_level == 0


@dataclass(slots=True)
class DisplayModel:
    """
    Everything the renderer needs and nothing about styling.

    ``columns`` lists the group columns followed by the value columns, which
    is the cell order of every row. ``hidden`` marks the state where no
    column is assigned to any role; the table then has no rows.
    """

    columns: list[Column] = field(default_factory=list)
    pivot_columns: list[Column] = field(default_factory=list)
    rows: list[DisplayRow] = field(default_factory=list)
    plan: QueryPlan | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    hidden: bool = False

    @property
    def group_count(self) -> int:
        return 0 if self.plan is None else self.plan.detail_level

    def cell_rows(self) -> list[tuple[Any, ...]]:
        return [row.cells for row in self.rows]

    def warnings(self) -> list[str]:
        return [diagnostic.message for diagnostic in self.diagnostics]


def _check_rows(dataset: Dataset, diagnostics: DiagnosticLog) -> Dataset:
    rows, malformed = dataset.split_rows()
    width = len(dataset.columns)
    for index in malformed:
        diagnostics.record(
            DiagnosticKind.MALFORMED_ROW,
            f"Row {index} has {len(dataset.rows[index])} cells, expected {width}",
            row=index,
        )
    return dataset if not malformed else dataset.with_rows(rows)


def compute_display_model(
    dataset: Dataset,
    settings: SummaryTableSettings,
    provider: ResultProvider | None = None,
    *,
    max_levels: int = DEFAULT_MAX_LEVELS,
) -> DisplayModel:
    """
    Build the display model for ``dataset`` under ``settings``.

    Args:
        dataset: Columns and rows of the query result
        settings: Column-role configuration
        provider: Aggregated rows per AggregationKey; defaults to aggregating
            ``dataset`` itself with Polars
        max_levels: Hierarchy depth bound for the grouping manager

    Returns:
        DisplayModel with ordered rows, merge descriptors and diagnostics
    """
    diagnostics = DiagnosticLog()
    dataset = _check_rows(dataset, diagnostics)
    resolved = resolve(settings, dataset, diagnostics)

    if resolved.is_empty:
        logger.info("display_model_hidden", configured=settings.referenced_columns())
        return DisplayModel(diagnostics=diagnostics.to_list(), hidden=True)

    plan = build_plan(
        resolved.group_names,
        resolved.value_names,
        show_totals=resolved.show_totals,
        grand_total=settings.grand_total,
    )
    if provider is None:
        provider = DatasetResultProvider(dataset)

    tagged = merge(plan, provider, diagnostics)
    grouping = GroupingManager(max_levels, range(plan.detail_level)).order(tagged)

    rows = [
        DisplayRow(
            cells=row.cells,
            grouping_level=row.grouping_level,
            is_subtotal=row.is_subtotal,
            spans=grouping.merge_descriptors[index],
        )
        for index, row in enumerate(grouping.rows_ordered)
    ]
    model = DisplayModel(
        columns=_columns(resolved, resolved.groups + resolved.values),
        pivot_columns=_columns(resolved, resolved.pivot_columns),
        rows=rows,
        plan=plan,
        diagnostics=diagnostics.to_list(),
    )
    logger.debug(
        "display_model_computed",
        rows=len(rows),
        keys=len(plan),
        diagnostics=len(model.diagnostics),
    )
    return model


def _columns(resolved: ResolvedColumns, indexes: tuple[int, ...]) -> list[Column]:
    return [resolved.columns[i] for i in indexes]
