from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Table model for the spreadsheet export tool.

A Table is what the workbook reader hands to the export pipeline: one sheet,
its header columns in source order and its data rows keyed by column name.
"""

__all__ = [
    "Table",
]


@dataclass(frozen=True)
class Table:
    """One sheet of a workbook after header extraction.

    Invariant: every row's key set is a subset of ``columns``. Keys missing
    from a row are read as empty string.
    """
    name: str  # Sheet name
    columns: list[str]  # Header order, unique, case-sensitive
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def sample(self, size: int) -> list[dict[str, Any]]:
        return self.rows[: max(0, size)]
