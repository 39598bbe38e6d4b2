"""Map configured column roles onto the columns of a concrete dataset."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .dataset import Column, Dataset
from .diagnostics import DiagnosticKind, DiagnosticLog
from .settings import SummaryTableSettings


@dataclass(frozen=True, slots=True)
class ResolvedColumns:
    """Role index lists over a dataset's column array, in configured order."""

    columns: tuple[Column, ...]
    groups: tuple[int, ...] = ()
    pivot_columns: tuple[int, ...] = ()
    values: tuple[int, ...] = ()
    unused: tuple[int, ...] = ()
    show_totals: dict[str, bool] = field(default_factory=dict)

    def names(self, indexes: Sequence[int]) -> list[str]:
        return [self.columns[i].name for i in indexes]

    @property
    def group_names(self) -> list[str]:
        return self.names(self.groups)

    @property
    def pivot_names(self) -> list[str]:
        return self.names(self.pivot_columns)

    @property
    def value_names(self) -> list[str]:
        return self.names(self.values)

    @property
    def is_empty(self) -> bool:
        """No group, pivot or value column survived resolution."""
        return not (self.groups or self.pivot_columns or self.values)


def _locate(
    names: Sequence[str],
    columns: Sequence[Column],
    role: str,
    diagnostics: DiagnosticLog | None,
) -> tuple[int, ...]:
    positions = {col.name: index for index, col in enumerate(columns)}
    indexes: list[int] = []
    for name in names:
        index = positions.get(name)
        if index is None:
            if diagnostics is not None:
                diagnostics.record(
                    DiagnosticKind.CONFIGURATION_MISMATCH,
                    f"{role} column '{name}' is not in the dataset",
                    column=name,
                )
            continue
        indexes.append(index)
    return tuple(indexes)


def resolve(
    settings: SummaryTableSettings,
    columns: Dataset | Iterable[Column],
    diagnostics: DiagnosticLog | None = None,
) -> ResolvedColumns:
    """
    Resolve role names against ``columns`` by exact name.

    Names absent from the dataset are dropped as if never configured. The
    configured order is kept; it is the nesting order of the hierarchy.
    """
    cols = tuple(columns.columns if isinstance(columns, Dataset) else columns)

    groups = _locate(settings.groups_sources, cols, "Group", diagnostics)
    pivots = _locate(settings.columns_source, cols, "Pivot", diagnostics)
    values = _locate(settings.values_sources, cols, "Value", diagnostics)
    unused = _locate(settings.unused_columns, cols, "Unused", diagnostics)

    show_totals: dict[str, bool] = {}
    for col in cols:
        configured = settings.show_totals_for(col.name)
        show_totals[col.name] = col.show_totals if configured is None else configured

    return ResolvedColumns(
        columns=cols,
        groups=groups,
        pivot_columns=pivots,
        values=values,
        unused=unused,
        show_totals=show_totals,
    )
