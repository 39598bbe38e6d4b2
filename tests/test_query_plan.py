"""Tests for aggregation keys and query plan construction."""

import pytest

from helpers import key
from summary_table import AggregationKey, build_plan


class TestAggregationKey:
    def test_equality_ignores_order(self) -> None:
        a = AggregationKey(("Region", "Product"), ("Sales", "Profit"))
        b = AggregationKey(("Product", "Region"), ("Profit", "Sales"))
        assert a == b
        assert hash(a) == hash(b)
        assert {a: 1}[b] == 1

    def test_order_is_kept(self) -> None:
        k = AggregationKey(["Product", "Region"], ["Sales"])
        assert k.groups == ("Product", "Region")
        assert k.depth == 2
        assert k.width == 3

    def test_different_components_differ(self) -> None:
        assert key(["Region"]) != key(["Region", "Product"])
        assert key(["Region"], ["Sales"]) != key(["Region"], ["Profit"])
        assert key(["Region"]) != ("Region", "Sales")


class TestBuildPlan:
    @pytest.mark.parametrize("n", [0, 1, 2, 3, 5])
    def test_all_levels_enabled_covers_every_prefix(self, n: int) -> None:
        groups = [f"g{i}" for i in range(n)]
        plan = build_plan(groups, ["v"])

        keys = list(plan.keys())

        assert len(keys) == n + 1
        assert [k.groups for k in keys] == [tuple(groups[:depth]) for depth in range(n, -1, -1)]
        assert all(k.aggregations == ("v",) for k in keys)

    def test_example_plan(self) -> None:
        """Region totals on, Product totals off, grand total off."""
        plan = build_plan(
            ["Region", "Product"],
            ["Sales"],
            show_totals={"Region": True, "Product": False},
            grand_total=False,
        )
        assert list(plan.keys()) == [key(["Region", "Product"]), key(["Region"])]

    def test_subtotal_follows_last_column_of_prefix(self) -> None:
        plan = build_plan(
            ["Region", "Product", "Channel"],
            ["Sales"],
            show_totals={"Region": False, "Product": True, "Channel": False},
        )
        assert [k.groups for k in plan.keys()] == [
            ("Region", "Product", "Channel"),
            ("Region", "Product"),
            (),
        ]

    def test_detail_level_always_present(self) -> None:
        plan = build_plan(
            ["Region"], ["Sales"], show_totals={"Region": False}, grand_total=False
        )
        assert list(plan.keys()) == [key(["Region"])]

    def test_no_value_columns(self) -> None:
        plan = build_plan(["Region"], [])
        keys = list(plan.keys())
        assert keys[0] == AggregationKey(("Region",), ())
        assert all(k.aggregations == () for k in keys)

    def test_no_group_columns(self) -> None:
        """Without groups the only key is the grand total, even when disabled."""
        for grand_total in (True, False):
            plan = build_plan([], ["Sales"], grand_total=grand_total)
            assert list(plan.keys()) == [key([])]
            assert plan.detail_level == 0

    def test_union_of_groups_equals_configuration(self) -> None:
        groups = ["Region", "Product", "Channel"]
        plan = build_plan(groups, ["Sales"], show_totals=dict.fromkeys(groups, False))
        union = set().union(*(k.groups for k in plan.keys()))
        assert union == set(groups)

    def test_plan_shape(self) -> None:
        plan = build_plan(["Region", "Product"], ["Sales"])
        assert plan.groups == ("Region", "Product")
        assert plan.groupings == (
            (("Region", "Product"),),
            (("Region",),),
            ((),),
        )
        assert plan.aggregations == ("Sales",)
        assert plan.detail_level == 2
        assert len(plan) == 3

    def test_plan_is_deterministic(self) -> None:
        a = build_plan(["Region", "Product"], ["Sales"], {"Region": False})
        b = build_plan(["Region", "Product"], ["Sales"], {"Region": False})
        assert a == b
