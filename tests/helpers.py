"""Helpers shared by several test modules."""

from typing import Any, Callable, Mapping, Sequence

from summary_table import AggregationKey, GroupingResult, TaggedRow

Rows = Sequence[Sequence[Any]]


def key(groups: Sequence[str], aggregations: Sequence[str] = ("Sales",)) -> AggregationKey:
    return AggregationKey(tuple(groups), tuple(aggregations))


def provider_from(results: Mapping[AggregationKey, Rows]) -> Callable[[AggregationKey], Rows]:
    """Provider answering from a fixed mapping; unknown keys fail."""

    def provide(k: AggregationKey) -> Rows:
        return results[k]

    return provide


def detail(*cells: Any, level: int = 2) -> TaggedRow:
    return TaggedRow(tuple(cells), level, False)


def subtotal(*cells: Any, level: int) -> TaggedRow:
    return TaggedRow(tuple(cells), level, True)


def assert_spans_partition(result: GroupingResult, column: int) -> None:
    """Every row belongs to exactly one contiguous span for ``column``."""
    rows = len(result.rows_ordered)
    index = 0
    while index < rows:
        start = result.span(index, column)
        assert start is not None, f"row {index} has no span for column {column}"
        assert start.is_start, f"row {index} continues a span that never started"
        for offset in range(start.height):
            member = result.span(index + offset, column)
            assert member is not None
            assert member.start_row == index
            assert member.height == start.height
        index += start.height
    assert index == rows
