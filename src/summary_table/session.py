"""Async refresh of a summary table whose results come from a slow provider."""

from __future__ import annotations

from .dataset import Dataset
from .display_model import DisplayModel, compute_display_model
from .grouping_manager import DEFAULT_MAX_LEVELS
from .logging import get_logger
from .query_plan import build_plan
from .result_provider import AsyncResultProvider, DatasetResultProvider, collect_results
from .settings import SummaryTableSettings
from .settings_resolver import resolve

logger = get_logger(__name__)


class SummaryTableSession:
    """
    Holds the latest display model of one summary table.

    Each ``refresh`` first resolves every provider result, then computes the
    model from that snapshot. A refresh started later supersedes one still
    waiting on its provider: the older result is discarded, never published.
    """

    def __init__(self, max_levels: int = DEFAULT_MAX_LEVELS) -> None:
        self.max_levels = max_levels
        self._generation = 0
        self._current: DisplayModel | None = None

    @property
    def current(self) -> DisplayModel | None:
        return self._current

    @property
    def generation(self) -> int:
        return self._generation

    async def refresh(
        self,
        dataset: Dataset,
        settings: SummaryTableSettings,
        provider: AsyncResultProvider | None = None,
    ) -> DisplayModel | None:
        """Recompute and publish; returns None when superseded meanwhile."""
        self._generation += 1
        generation = self._generation

        resolved = resolve(settings, dataset)
        snapshot = None
        if not resolved.is_empty:
            plan = build_plan(
                resolved.group_names,
                resolved.value_names,
                show_totals=resolved.show_totals,
                grand_total=settings.grand_total,
            )
            if provider is None:
                rows, _ = dataset.split_rows()
                provider = DatasetResultProvider(dataset.with_rows(rows))
            snapshot = await collect_results(plan, provider)

        if generation != self._generation:
            logger.info(
                "refresh_superseded", generation=generation, latest=self._generation
            )
            return None

        model = compute_display_model(
            dataset, settings, snapshot, max_levels=self.max_levels
        )
        self._current = model
        return model
