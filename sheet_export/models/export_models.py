from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Export domain models: column roles, detected shape, request and output.

Everything here is request-scoped. Roles and shapes are recomputed on every
export call and never stored between calls.
"""

__all__ = [
    "ColumnRole",
    "AttendanceShape",
    "ExportFormat",
    "DelimiterPolicy",
    "ExportRequest",
    "OutputDocument",
    "ExportPayload",
]


class ColumnRole(Enum):
    """Content-based classification of a single column."""
    TIME = "time"
    DATE = "date"
    IDENTIFIER = "identifier"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class AttendanceShape:
    """Concrete columns playing each role of a personnel attendance table.

    Either time slot may be None when fewer than two time columns were found;
    the matching half of the row split is skipped in that case.
    """
    identifier_column: str
    date_column: str
    first_time_column: str | None = None
    second_time_column: str | None = None


class ExportFormat(Enum):
    CSV = "csv"
    TXT = "txt"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        if self is ExportFormat.CSV:
            return "text/csv;charset=utf-8"
        return "text/plain;charset=utf-8"


class DelimiterPolicy(Enum):
    """Field separator policy for the delimited output.

    - TAB: tab for both csv and txt (default, what the downstream consumer reads)
    - LEGACY: comma for csv, tab for txt
    """
    TAB = "tab"
    LEGACY = "legacy"

    def delimiter_for(self, fmt: ExportFormat) -> str:
        if self is DelimiterPolicy.LEGACY and fmt is ExportFormat.CSV:
            return ","
        return "\t"


@dataclass(frozen=True)
class ExportRequest:
    """User choices for one export: ordered column selection and format.

    The selection must be non-empty; callers treat an empty selection as a
    no-op and never build a request for it.
    """
    columns: list[str]
    format: ExportFormat = ExportFormat.CSV
    delimiter_policy: DelimiterPolicy = DelimiterPolicy.TAB

    @property
    def delimiter(self) -> str:
        return self.delimiter_policy.delimiter_for(self.format)


@dataclass(frozen=True)
class OutputDocument:
    """Transformed row set over a fixed output column list."""
    columns: list[str]
    rows: list[dict[str, Any]] = field(default_factory=list)
    shape: AttendanceShape | None = None  # None -> projection path

    @property
    def transformed(self) -> bool:
        return self.shape is not None


@dataclass(frozen=True)
class ExportPayload:
    """Serialized export ready to be saved."""
    file_name: str
    mime_type: str
    text: str  # Includes the leading byte-order mark
    row_count: int = 0
    transformed: bool = False

    def to_bytes(self) -> bytes:
        return self.text.encode("utf-8")
