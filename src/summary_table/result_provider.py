"""
Result provider boundary

A result provider maps an AggregationKey to already-aggregated rows: one row
per distinct combination of the key's group values, holding the group cells
followed by the measure cells, in the key's order.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Mapping, Sequence

import polars as pl

from .dataset import Dataset
from .diagnostics import ProviderError
from .logging import get_logger
from .query_plan import AggregationKey, QueryPlan

logger = get_logger(__name__)

Rows = Sequence[Sequence[Any]]
ResultProvider = Callable[[AggregationKey], Rows]
AsyncResultProvider = Callable[[AggregationKey], Awaitable[Rows] | Rows]


BUILTIN_AGGREGATIONS: dict[str, Callable[[str], pl.Expr]] = {
    "sum": lambda name: pl.col(name).sum(),
    "mean": lambda name: pl.col(name).mean(),
    "min": lambda name: pl.col(name).min(),
    "max": lambda name: pl.col(name).max(),
    "count": lambda name: pl.col(name).count(),
    "first": lambda name: pl.col(name).first(),
}


class ResultSnapshot:
    """Synchronous provider over a complete set of resolved results."""

    def __init__(
        self,
        results: Mapping[AggregationKey, Rows] | None = None,
        failures: Mapping[AggregationKey, str] | None = None,
    ) -> None:
        self._results = dict(results or {})
        self._failures = dict(failures or {})

    def __call__(self, key: AggregationKey) -> Rows:
        if key in self._failures:
            raise ProviderError(key, self._failures[key])
        if key not in self._results:
            raise ProviderError(key, "key was not part of the resolved plan")
        return self._results[key]

    @property
    def failures(self) -> dict[AggregationKey, str]:
        return dict(self._failures)

    def __contains__(self, key: object) -> bool:
        return key in self._results or key in self._failures

    def __len__(self) -> int:
        return len(self._results) + len(self._failures)


async def _fetch(provider: AsyncResultProvider, key: AggregationKey) -> Rows:
    result = provider(key)
    if inspect.isawaitable(result):
        result = await result
    return result


async def collect_results(plan: QueryPlan, provider: AsyncResultProvider) -> ResultSnapshot:
    """
    Resolve every key of ``plan`` before any merging happens.

    Sync and async providers are both accepted. A failing key is recorded in
    the snapshot, not raised.
    """
    keys = list(plan.keys())
    outcomes = await asyncio.gather(
        *(_fetch(provider, key) for key in keys), return_exceptions=True
    )

    results: dict[AggregationKey, Rows] = {}
    failures: dict[AggregationKey, str] = {}
    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            failures[key] = f"{type(outcome).__name__}: {outcome}"
            logger.warning("provider_call_failed", key=str(key), error=str(outcome))
        else:
            results[key] = outcome
    return ResultSnapshot(results, failures)


class DatasetResultProvider:
    """
    Reference provider aggregating a Dataset with Polars.

    Groups keep their first-appearance order. ``aggregation`` is either one
    built-in name for every value column or a mapping of column name to name.
    """

    def __init__(
        self,
        dataset: Dataset,
        aggregation: str | Mapping[str, str] = "sum",
    ) -> None:
        self.dataset = dataset
        self.aggregation = aggregation
        self._frame: pl.DataFrame | None = None

        names = (
            [aggregation] if isinstance(aggregation, str) else list(aggregation.values())
        )
        unknown = [name for name in names if name not in BUILTIN_AGGREGATIONS]
        if unknown:
            raise ValueError(
                f"Unknown aggregation: {unknown}. "
                f"Available: {', '.join(BUILTIN_AGGREGATIONS)}"
            )

    @property
    def frame(self) -> pl.DataFrame:
        if self._frame is None:
            self._frame = self.dataset.to_polars()
        return self._frame

    def _aggregation_for(self, column: str) -> str:
        if isinstance(self.aggregation, str):
            return self.aggregation
        return self.aggregation.get(column, "sum")

    def expressions(self, key: AggregationKey) -> list[pl.Expr]:
        """Measure expressions aliased by position; a value column may also group."""
        return [
            BUILTIN_AGGREGATIONS[self._aggregation_for(name)](name).alias(f"__value_{index}")
            for index, name in enumerate(key.aggregations)
        ]

    def __call__(self, key: AggregationKey) -> Rows:
        df = self.frame
        exprs = self.expressions(key)

        if not key.groups:
            if not exprs:
                return [()]
            result = df.select(exprs)
        elif exprs:
            result = df.group_by(list(key.groups), maintain_order=True).agg(exprs)
        else:
            result = df.select(list(key.groups)).unique(maintain_order=True)

        measures = [f"__value_{index}" for index in range(len(key.aggregations))]
        result = result.select([*key.groups, *measures])
        return result.rows()
