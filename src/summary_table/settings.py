"""
Summary table settings

Column-role configuration as produced by the settings editor: which columns
form the row hierarchy, the column hierarchy and the measures, plus
per-column metadata such as the "show totals" toggle.
"""

# pyre-strict

from pathlib import Path
from typing import Any, Iterable, Self

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .dataset import Column, Dataset


class ColumnMetadata(BaseModel):
    """Per-column options attached to a column name"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    show_totals: bool = Field(default=True, alias="showTotals")


class SummaryTableSettings(BaseModel):
    """
    Column roles for a summary table.

    Attributes:
        groups_sources: Row hierarchy columns, outermost first
        columns_source: Column hierarchy (pivot) columns, may be empty
        values_sources: Value columns to aggregate
        unused_columns: Columns the user left out of every role
        column_name_to_metadata: Per-column options keyed by column name
        grand_total: Whether the grand-total row is requested

    Names are matched against a dataset later, by the resolver; nothing here
    knows which columns currently exist.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    groups_sources: list[str] = Field(default_factory=list, alias="groupsSources")
    columns_source: list[str] = Field(default_factory=list, alias="columnsSource")
    values_sources: list[str] = Field(default_factory=list, alias="valuesSources")
    unused_columns: list[str] = Field(default_factory=list, alias="unusedColumns")
    column_name_to_metadata: dict[str, ColumnMetadata] = Field(
        default_factory=dict, alias="columnNameToMetadata"
    )
    grand_total: bool = Field(default=True, alias="grandTotal")

    @field_validator(
        "groups_sources", "columns_source", "values_sources", "unused_columns",
        mode="before",
    )
    @classmethod
    def normalize_names(cls, v: object) -> object:
        """Accept None or a single name; drop duplicates keeping the first"""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return v
        names: list[object] = []
        for name in v:
            if isinstance(name, str) and not name.strip():
                raise ValueError("Column name cannot be empty")
            if name not in names:
                names.append(name)
        return names

    @field_validator("column_name_to_metadata", mode="before")
    @classmethod
    def normalize_metadata(cls, v: object) -> object:
        if v is None:
            return {}
        return v

    @classmethod
    def from_yaml(cls, config: dict[str, Any] | str | Path) -> Self:
        """
        Load settings from a YAML file, YAML text or dictionary

        Args:
            config: YAML file path, dictionary, or string content

        Returns:
            SummaryTableSettings instance
        """
        if isinstance(config, (str, Path)):
            if isinstance(config, Path) or "\n" not in config:
                with open(config, "r") as f:
                    config_dict = yaml.safe_load(f)
            else:
                config_dict = yaml.safe_load(config)
        else:
            config_dict = config

        return cls.model_validate(config_dict or {})

    def override(self, **kwargs: Any) -> Self:
        """Create a new settings object with overridden values"""
        current_data = self.model_dump()
        current_data.update(kwargs)
        return self.__class__.model_validate(current_data)

    def show_totals_for(self, name: str) -> bool | None:
        metadata = self.column_name_to_metadata.get(name)
        return None if metadata is None else metadata.show_totals

    def referenced_columns(self) -> list[str]:
        """Every column name used by a role, in role order, without repeats."""
        names: list[str] = []
        for name in [
            *self.groups_sources,
            *self.columns_source,
            *self.values_sources,
            *self.unused_columns,
        ]:
            if name not in names:
                names.append(name)
        return names


def settings_are_valid(
    settings: SummaryTableSettings | None, columns: Dataset | Iterable[Column]
) -> bool:
    """True when every column the settings reference exists in ``columns``."""
    if settings is None:
        return False
    cols = columns.columns if isinstance(columns, Dataset) else columns
    available = {col.name for col in cols}
    return all(name in available for name in settings.referenced_columns())
