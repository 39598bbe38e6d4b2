"""Dataset container: ordered columns plus ordered rows of cell values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import polars as pl

VISIBILITY_TYPES = ("normal", "details-only", "sensitive")


@dataclass(frozen=True, slots=True)
class Column:
    """Dataset column referenced by name from settings"""

    name: str
    display_name: str | None = None
    visibility_type: str = "normal"
    show_totals: bool = True

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Column name cannot be empty")
        if self.visibility_type not in VISIBILITY_TYPES:
            raise ValueError(
                f"Invalid visibility type: '{self.visibility_type}'. "
                f"Valid options are: {', '.join(VISIBILITY_TYPES)}"
            )
        if self.display_name is None:
            object.__setattr__(self, "display_name", self.name)

    @property
    def is_visible(self) -> bool:
        return self.visibility_type != "details-only"


@dataclass(frozen=True, slots=True)
class Dataset:
    """
    Query result as seen by the summary table.

    Rows are kept exactly as supplied; ``split_rows`` separates the ones
    whose cell count does not match the column list.
    """

    columns: tuple[Column, ...]
    rows: tuple[tuple[Any, ...], ...] = ()

    def __init__(
        self,
        columns: Iterable[Column | str],
        rows: Iterable[Sequence[Any]] = (),
    ) -> None:
        cols = tuple(c if isinstance(c, Column) else Column(name=c) for c in columns)
        seen: set[str] = set()
        duplicates = []
        for col in cols:
            if col.name in seen:
                duplicates.append(col.name)
            seen.add(col.name)
        if duplicates:
            raise ValueError(f"Duplicate column names: {duplicates}")

        object.__setattr__(self, "columns", cols)
        object.__setattr__(self, "rows", tuple(tuple(row) for row in rows))

    @classmethod
    def from_polars(
        cls, df: pl.DataFrame, columns: Sequence[Column] | None = None
    ) -> Dataset:
        """Build a dataset from a DataFrame, optionally with column metadata."""
        if columns is None:
            columns = [Column(name=name) for name in df.columns]
        elif [c.name for c in columns] != df.columns:
            raise ValueError(
                f"Column metadata {[c.name for c in columns]} does not match "
                f"DataFrame columns {df.columns}"
            )
        return cls(columns, df.iter_rows())

    def to_polars(self) -> pl.DataFrame:
        """Return well-formed rows as a DataFrame (columns in dataset order)."""
        rows, _ = self.split_rows()
        return pl.DataFrame(
            rows,
            schema=self.column_names,
            orient="row",
            infer_schema_length=None,
        )

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    def index_of(self, name: str) -> int | None:
        """Exact-name lookup; no case folding or fuzzy matching."""
        for index, col in enumerate(self.columns):
            if col.name == name:
                return index
        return None

    def split_rows(self) -> tuple[list[tuple[Any, ...]], list[int]]:
        """Return (well-formed rows, indexes of rows with a wrong cell count)."""
        width = len(self.columns)
        valid: list[tuple[Any, ...]] = []
        malformed: list[int] = []
        for index, row in enumerate(self.rows):
            if len(row) == width:
                valid.append(row)
            else:
                malformed.append(index)
        return valid, malformed

    def with_rows(self, rows: Iterable[Sequence[Any]]) -> Dataset:
        return Dataset(self.columns, rows)
