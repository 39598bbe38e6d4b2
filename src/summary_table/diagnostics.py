"""
Diagnostics side channel for recoverable problems.

Nothing after input validation raises: a missing column, a failing result
provider or a malformed row degrades the table and leaves a Diagnostic
behind for the caller to show or ignore.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from .logging import get_logger

logger = get_logger(__name__)


class DiagnosticKind(Enum):
    """Kinds of recoverable problems"""

    CONFIGURATION_MISMATCH = "configuration_mismatch"
    PROVIDER_FAILURE = "provider_failure"
    MALFORMED_ROW = "malformed_row"


class ProviderError(RuntimeError):
    """Raised when results for an aggregation key are unavailable."""

    def __init__(self, key: object, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"No results for {key}: {reason}")


@dataclass(frozen=True, slots=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    column: str | None = None
    key: Any = None
    row: int | None = None


@dataclass(slots=True)
class DiagnosticLog:
    """Ordered collection of diagnostics recorded during one computation."""

    _entries: list[Diagnostic] = field(default_factory=list)

    def record(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        column: str | None = None,
        key: Any = None,
        row: int | None = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(kind=kind, message=message, column=column, key=key, row=row)
        self._entries.append(diagnostic)
        logger.warning(
            kind.value,
            message=message,
            column=column,
            key=None if key is None else str(key),
            row=row,
        )
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [entry for entry in self._entries if entry.kind is kind]

    def to_list(self) -> list[Diagnostic]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
