"""
Row ordering and cell merging for summary tables

Takes the tagged rows produced by the merger and returns them in display
order: detail rows grouped by their group-key prefixes, each subtotal right
after the group it summarizes, the grand total last. For every group column
it also computes which consecutive cells render as a single spanning cell.
"""

# pyre-strict

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Sequence

from .logging import get_logger
from .row_merger import TaggedRow

logger = get_logger(__name__)

DEFAULT_MAX_LEVELS = 30

# every NaN cell groups with every other NaN cell
_NAN_KEY = object()


@dataclass(frozen=True, slots=True)
class MergeDescriptor:
    """Span membership of one cell: the span starts at ``start_row`` and
    covers ``height`` rows."""

    row: int
    start_row: int
    height: int

    @property
    def is_start(self) -> bool:
        return self.row == self.start_row


@dataclass(slots=True)
class GroupingResult:
    rows_ordered: list[TaggedRow]
    merge_descriptors: list[dict[int, MergeDescriptor]]

    def span(self, row: int, column: int) -> MergeDescriptor | None:
        if not 0 <= row < len(self.merge_descriptors):
            return None
        return self.merge_descriptors[row].get(column)


@dataclass(slots=True)
class _Node:
    children: dict[Hashable, _Node] = field(default_factory=dict)
    rows: list[TaggedRow] = field(default_factory=list)
    subtotals: list[TaggedRow] = field(default_factory=list)

    def emit(self, out: list[TaggedRow]) -> None:
        out.extend(self.rows)
        for child in self.children.values():
            child.emit(out)
        out.extend(self.subtotals)


def _hashable(value: Any) -> Hashable:
    """Normal form usable as a dict key; equal values map to equal keys."""
    if isinstance(value, (list, tuple)):
        return tuple(_hashable(item) for item in value)
    if isinstance(value, dict):
        return tuple(
            sorted(
                ((key, _hashable(item)) for key, item in value.items()),
                key=lambda pair: repr(pair[0]),
            )
        )
    if isinstance(value, set):
        return frozenset(_hashable(item) for item in value)
    if isinstance(value, float) and math.isnan(value):
        return _NAN_KEY
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


class GroupingManager:
    """
    Orders tagged rows and computes merge descriptors.

    Args:
        max_levels: Hierarchy depth bound; group columns past it are treated
            as plain detail (no subtotal placement, no merged cells)
        group_column_indexes: Cell positions of the group columns, outermost
            first; positions outside the row width are ignored
    """

    def __init__(
        self,
        max_levels: int = DEFAULT_MAX_LEVELS,
        group_column_indexes: Iterable[int] = (),
    ) -> None:
        self.max_levels = max(int(max_levels), 0)
        self.group_column_indexes = list(group_column_indexes)

    def valid_columns(self, rows: Sequence[TaggedRow]) -> list[int]:
        width = min((len(row.cells) for row in rows), default=0)
        columns: list[int] = []
        for index in self.group_column_indexes:
            if 0 <= index < width and index not in columns:
                columns.append(index)
        return columns

    def order(self, tagged_rows: Iterable[TaggedRow]) -> GroupingResult:
        rows = list(tagged_rows)
        columns = self.valid_columns(rows)
        if len(columns) < len(self.group_column_indexes):
            logger.debug(
                "group_columns_skipped",
                requested=self.group_column_indexes,
                used=columns,
            )
        depth = min(len(columns), self.max_levels)

        ordered = self._place(rows, columns, depth)
        descriptors = self._spans(ordered, columns, depth)
        return GroupingResult(rows_ordered=ordered, merge_descriptors=descriptors)

    @staticmethod
    def _place(
        rows: Sequence[TaggedRow], columns: Sequence[int], depth: int
    ) -> list[TaggedRow]:
        root = _Node()
        grand_totals: list[TaggedRow] = []

        for row in rows:
            level = min(row.grouping_level, len(columns))
            if columns and level == 0:
                grand_totals.append(row)
                continue

            attach_as_subtotal = row.is_subtotal and level < len(columns) and level <= depth
            node = root
            for column in columns[: min(level, depth)]:
                node = node.children.setdefault(_hashable(row.cells[column]), _Node())

            if attach_as_subtotal:
                node.subtotals.append(row)
            else:
                node.rows.append(row)

        ordered: list[TaggedRow] = []
        root.emit(ordered)
        ordered.extend(grand_totals)
        return ordered

    @staticmethod
    def _spans(
        rows: Sequence[TaggedRow], columns: Sequence[int], depth: int
    ) -> list[dict[int, MergeDescriptor]]:
        descriptors: list[dict[int, MergeDescriptor]] = [{} for _ in rows]

        for position, column in enumerate(columns):
            bounds: list[tuple[int, int]] = []
            if position >= depth:
                bounds = [(index, index + 1) for index in range(len(rows))]
            else:
                start: int | None = None
                current: tuple[Any, ...] = ()
                for index, row in enumerate(rows):
                    # rows at or above this level summarize over the column
                    if min(row.grouping_level, len(columns)) <= position:
                        if start is not None:
                            bounds.append((start, index))
                            start = None
                        bounds.append((index, index + 1))
                        continue
                    values = tuple(_hashable(row.cells[c]) for c in columns[: position + 1])
                    if start is not None and values == current:
                        continue
                    if start is not None:
                        bounds.append((start, index))
                    start, current = index, values
                if start is not None:
                    bounds.append((start, len(rows)))

            for begin, end in bounds:
                for index in range(begin, end):
                    descriptors[index][column] = MergeDescriptor(index, begin, end - begin)

        return descriptors


def order(
    tagged_rows: Iterable[TaggedRow],
    group_column_indexes: Iterable[int],
    max_levels: int = DEFAULT_MAX_LEVELS,
) -> GroupingResult:
    """Order ``tagged_rows`` and compute merge descriptors in one call."""
    return GroupingManager(max_levels, group_column_indexes).order(tagged_rows)
