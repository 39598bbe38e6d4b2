"""
Query plan for a summary table

Derives, from the resolved group and value columns, which grouping levels
need their own aggregation and in which order the result provider is asked
for them.
"""

# pyre-strict

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Sequence

from .logging import get_logger

logger = get_logger(__name__)

Groups = tuple[str, ...]
Aggregations = tuple[str, ...]


@dataclass(frozen=True, slots=True, eq=False)
class AggregationKey:
    """
    One slice of the pivot: a grouping plus the value columns to aggregate.

    Both components keep their order (the provider returns cells in it) but
    equality and hashing ignore order.
    """

    groups: Groups
    aggregations: Aggregations

    def __post_init__(self) -> None:
        object.__setattr__(self, "groups", tuple(self.groups))
        object.__setattr__(self, "aggregations", tuple(self.aggregations))

    @property
    def depth(self) -> int:
        return len(self.groups)

    @property
    def width(self) -> int:
        """Cells per provider row for this key."""
        return len(self.groups) + len(self.aggregations)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AggregationKey):
            return NotImplemented
        return frozenset(self.groups) == frozenset(other.groups) and frozenset(
            self.aggregations
        ) == frozenset(other.aggregations)

    def __hash__(self) -> int:
        return hash((frozenset(self.groups), frozenset(self.aggregations)))

    def __str__(self) -> str:
        return f"({{{', '.join(self.groups)}}}, {{{', '.join(self.aggregations)}}})"


@dataclass(frozen=True, slots=True)
class QueryPlan:
    """
    Grouping levels to fetch, deepest first.

    ``groupings[i]`` lists the Groups needed at the i-th emitted level; every
    level currently needs exactly one grouping.
    """

    groups: Groups
    groupings: tuple[tuple[Groups, ...], ...]
    aggregations: Aggregations = field(default_factory=tuple)

    @property
    def detail_level(self) -> int:
        return len(self.groups)

    def keys(self) -> Iterator[AggregationKey]:
        """AggregationKeys in emission order (detail first, grand total last)."""
        for level in self.groupings:
            for groups in level:
                yield AggregationKey(groups, self.aggregations)

    def __len__(self) -> int:
        return sum(len(level) for level in self.groupings)


def build_plan(
    groups: Sequence[str],
    aggregations: Sequence[str],
    show_totals: Mapping[str, bool] | None = None,
    grand_total: bool = True,
) -> QueryPlan:
    """
    Build the query plan for resolved group and value columns.

    Level k keeps the first k group columns. The detail level (all columns)
    is always present; a subtotal level 0 < k < N is present when its last
    column, ``groups[k-1]``, has totals enabled; the grand total (k = 0) is
    present when ``grand_total`` is set.

    Args:
        groups: Resolved group column names, outermost first
        aggregations: Resolved value column names
        show_totals: Per-column "show totals" flags; missing means enabled
        grand_total: Whether to emit the grand-total level

    Returns:
        QueryPlan with levels ordered deepest first
    """
    full: Groups = tuple(groups)
    flags = show_totals or {}
    levels: list[tuple[Groups, ...]] = []

    for depth in range(len(full), -1, -1):
        if depth == len(full):
            included = True
        elif depth == 0:
            included = grand_total
        else:
            included = flags.get(full[depth - 1], True)
        if included:
            levels.append((full[:depth],))

    plan = QueryPlan(groups=full, groupings=tuple(levels), aggregations=tuple(aggregations))
    logger.debug(
        "plan_built",
        groups=list(full),
        aggregations=list(plan.aggregations),
        levels=[len(level[0]) for level in levels],
    )
    return plan
