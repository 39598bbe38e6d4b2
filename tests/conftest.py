"""Shared fixtures for summary table tests."""

import pytest

from helpers import key, provider_from
from summary_table import Column, Dataset, SummaryTableSettings


@pytest.fixture
def sales_dataset() -> Dataset:
    """Detail rows with regions and products deliberately interleaved."""
    return Dataset(
        [Column("Region"), Column("Product"), Column("Sales")],
        [
            ("US", "A", 10),
            ("EU", "A", 5),
            ("US", "B", 20),
            ("EU", "C", 7),
            ("US", "A", 3),
        ],
    )


@pytest.fixture
def sales_settings() -> SummaryTableSettings:
    return SummaryTableSettings(
        groupsSources=["Region", "Product"],
        valuesSources=["Sales"],
    )


@pytest.fixture
def example_settings() -> SummaryTableSettings:
    """Region totals on, Product totals off, no grand total."""
    return SummaryTableSettings(
        groupsSources=["Region", "Product"],
        valuesSources=["Sales"],
        columnNameToMetadata={
            "Region": {"showTotals": True},
            "Product": {"showTotals": False},
        },
        grandTotal=False,
    )


@pytest.fixture
def example_dataset() -> Dataset:
    return Dataset(["Region", "Product", "Sales"], [("US", "A", 10), ("US", "B", 20)])


@pytest.fixture
def example_provider():
    return provider_from(
        {
            key(["Region", "Product"]): [("US", "A", 10), ("US", "B", 20)],
            key(["Region"]): [("US", 30)],
        }
    )
