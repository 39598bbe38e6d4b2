"""Stitch per-key result sets into one tagged row sequence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .diagnostics import DiagnosticKind, DiagnosticLog
from .logging import get_logger
from .query_plan import AggregationKey, QueryPlan
from .result_provider import ResultProvider

logger = get_logger(__name__)


class _NotApplicable:
    """Group cell of a row that summarizes over that group column."""

    _instance: _NotApplicable | None = None

    def __new__(cls) -> _NotApplicable:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "-"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "NOT_APPLICABLE"


NOT_APPLICABLE = _NotApplicable()


@dataclass(frozen=True, slots=True)
class TaggedRow:
    """Row cells (group cells, then measure cells) plus merger-assigned tags."""

    cells: tuple[Any, ...]
    grouping_level: int
    is_subtotal: bool

    @property
    def is_grand_total(self) -> bool:
        return self.is_subtotal and self.grouping_level == 0

    def __len__(self) -> int:
        return len(self.cells)


def _align(
    key: AggregationKey, row: tuple[Any, ...], groups: tuple[str, ...]
) -> tuple[Any, ...]:
    positions = {name: index for index, name in enumerate(key.groups)}
    group_cells = tuple(
        row[positions[name]] if name in positions else NOT_APPLICABLE for name in groups
    )
    return group_cells + row[key.depth :]


def merge(
    plan: QueryPlan,
    provider: ResultProvider,
    diagnostics: DiagnosticLog | None = None,
) -> list[TaggedRow]:
    """
    Concatenate provider results in plan order, tagging every row.

    A key whose provider call raises, or which returns any row with a wrong
    cell count, contributes nothing; the rest of the table is still built.
    """
    detail_level = plan.detail_level
    merged: list[TaggedRow] = []

    for key in plan.keys():
        try:
            rows = [tuple(row) for row in provider(key)]
        except Exception as exc:
            _drop(diagnostics, key, f"provider failed: {exc}")
            continue

        bad = [index for index, row in enumerate(rows) if len(row) != key.width]
        if bad:
            _drop(
                diagnostics,
                key,
                f"{len(bad)} row(s) do not have {key.width} cells (first at {bad[0]})",
            )
            continue

        level = key.depth
        is_subtotal = level < detail_level
        merged.extend(
            TaggedRow(_align(key, row, plan.groups), level, is_subtotal) for row in rows
        )

    logger.debug("rows_merged", keys=len(plan), rows=len(merged))
    return merged


def _drop(diagnostics: DiagnosticLog | None, key: AggregationKey, reason: str) -> None:
    logger.info("key_dropped", key=str(key), reason=reason)
    if diagnostics is not None:
        diagnostics.record(
            DiagnosticKind.PROVIDER_FAILURE,
            f"Results for {key} dropped: {reason}",
            key=key,
        )
