"""Tests for the result provider boundary."""

import asyncio

import polars as pl
import pytest

from helpers import key
from summary_table import (
    AggregationKey,
    Dataset,
    DatasetResultProvider,
    ProviderError,
    ResultSnapshot,
    build_plan,
    collect_results,
)


class TestDatasetResultProvider:
    def test_groups_in_first_appearance_order(self, sales_dataset) -> None:
        provider = DatasetResultProvider(sales_dataset)
        rows = provider(key(["Region", "Product"]))
        assert rows == [("US", "A", 13), ("EU", "A", 5), ("US", "B", 20), ("EU", "C", 7)]

    def test_cells_follow_key_order(self, sales_dataset) -> None:
        provider = DatasetResultProvider(sales_dataset)
        rows = provider(key(["Product", "Region"]))
        assert rows[0] == ("A", "US", 13)

    def test_subtotal_and_grand_total(self, sales_dataset) -> None:
        provider = DatasetResultProvider(sales_dataset)
        assert provider(key(["Region"])) == [("US", 33), ("EU", 12)]
        assert provider(key([])) == [(45,)]

    def test_per_column_aggregation(self) -> None:
        dataset = Dataset(
            ["Region", "Sales", "Price"],
            [("US", 10, 2.0), ("US", 20, 4.0), ("EU", 5, 1.0)],
        )
        provider = DatasetResultProvider(dataset, {"Price": "mean"})

        rows = provider(key(["Region"], ["Sales", "Price"]))

        assert rows == [("US", 30, 3.0), ("EU", 5, 1.0)]

    @pytest.mark.parametrize(
        ("aggregation", "expected"),
        [("min", 3), ("max", 20), ("count", 5), ("first", 10)],
    )
    def test_builtin_aggregations(self, sales_dataset, aggregation, expected) -> None:
        provider = DatasetResultProvider(sales_dataset, aggregation)
        assert provider(key([])) == [(expected,)]

    def test_no_value_columns(self, sales_dataset) -> None:
        provider = DatasetResultProvider(sales_dataset)
        assert provider(AggregationKey(("Region",), ())) == [("US",), ("EU",)]
        assert provider(AggregationKey((), ())) == [()]

    def test_unknown_aggregation(self, sales_dataset) -> None:
        with pytest.raises(ValueError, match="Unknown aggregation"):
            DatasetResultProvider(sales_dataset, "median_of_medians")

    def test_frame_is_built_from_dataset(self, sales_dataset) -> None:
        frame = DatasetResultProvider(sales_dataset).frame
        assert isinstance(frame, pl.DataFrame)
        assert frame.columns == ["Region", "Product", "Sales"]
        assert frame.height == 5


class TestResultSnapshot:
    def test_returns_resolved_rows(self) -> None:
        snapshot = ResultSnapshot({key(["Region"]): [("US", 1)]})
        assert snapshot(key(["Region"])) == [("US", 1)]
        assert key(["Region"]) in snapshot
        assert len(snapshot) == 1

    def test_failed_key_raises(self) -> None:
        snapshot = ResultSnapshot(failures={key(["Region"]): "timeout"})
        with pytest.raises(ProviderError, match="timeout"):
            snapshot(key(["Region"]))

    def test_unknown_key_raises(self) -> None:
        with pytest.raises(ProviderError):
            ResultSnapshot()(key(["Region"]))


class TestCollectResults:
    def test_async_provider(self) -> None:
        plan = build_plan(["Region"], ["Sales"])
        calls = []

        async def provider(k: AggregationKey):
            calls.append(k)
            await asyncio.sleep(0)
            return [("US", 1)] if k.groups else [(1,)]

        snapshot = asyncio.run(collect_results(plan, provider))

        assert sorted(len(k.groups) for k in calls) == [0, 1]
        assert snapshot(key(["Region"])) == [("US", 1)]
        assert snapshot(key([])) == [(1,)]
        assert snapshot.failures == {}

    def test_sync_provider_and_failure(self) -> None:
        plan = build_plan(["Region"], ["Sales"])

        def provider(k: AggregationKey):
            if not k.groups:
                raise RuntimeError("engine unavailable")
            return [("US", 1)]

        snapshot = asyncio.run(collect_results(plan, provider))

        assert snapshot(key(["Region"])) == [("US", 1)]
        assert "engine unavailable" in snapshot.failures[key([])]
        with pytest.raises(ProviderError):
            snapshot(key([]))


def test_value_column_that_also_groups(sales_dataset) -> None:
    provider = DatasetResultProvider(sales_dataset)

    rows = provider(key(["Region", "Sales"]))

    assert rows[:2] == [("US", 10, 10), ("EU", 5, 5)]
    assert len(rows) == 5
