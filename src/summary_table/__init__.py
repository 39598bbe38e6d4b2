"""
Summary Table - grouping, subtotal placement and row merging for pivot-style tables.

Turns column-role settings into a query plan, stitches the aggregated result
sets back together and orders them for display with subtotal rows and
merged group cells.
"""

# pyre-strict

from .dataset import Column, Dataset
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog, ProviderError
from .display_model import DisplayModel, DisplayRow, compute_display_model
from .grouping_manager import (
    DEFAULT_MAX_LEVELS,
    GroupingManager,
    GroupingResult,
    MergeDescriptor,
    order,
)
from .query_plan import AggregationKey, QueryPlan, build_plan
from .result_provider import DatasetResultProvider, ResultSnapshot, collect_results
from .row_merger import NOT_APPLICABLE, TaggedRow, merge
from .session import SummaryTableSession
from .settings import ColumnMetadata, SummaryTableSettings, settings_are_valid
from .settings_resolver import ResolvedColumns, resolve


__all__ = [
    # Data
    "Column",
    "Dataset",
    "ColumnMetadata",
    "SummaryTableSettings",
    "settings_are_valid",
    # Pipeline
    "ResolvedColumns",
    "resolve",
    "AggregationKey",
    "QueryPlan",
    "build_plan",
    "DatasetResultProvider",
    "ResultSnapshot",
    "collect_results",
    "NOT_APPLICABLE",
    "TaggedRow",
    "merge",
    "DEFAULT_MAX_LEVELS",
    "GroupingManager",
    "GroupingResult",
    "MergeDescriptor",
    "order",
    # Display
    "DisplayModel",
    "DisplayRow",
    "compute_display_model",
    "SummaryTableSession",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticLog",
    "ProviderError",
]
