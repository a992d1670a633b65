from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""WorkbookExport domain model and ExportStatus enum.

Tracks one source workbook through a run, from discovery to the written
output file (or the reason it was not written).
"""


class ExportStatus(Enum):
    """Per-workbook export lifecycle.

    State transitions: pending -> (success | failed | skipped)

    - SKIPPED: the column selection was empty for this table, nothing exported
    """
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class WorkbookExport:
    """Outcome of exporting a single workbook."""
    path: Path                           # Source workbook
    name: str                            # Source file name
    sheet: str | None = None             # Sheet actually exported
    start_time: datetime | None = None   # UTC
    end_time: datetime | None = None     # UTC
    status: ExportStatus = ExportStatus.PENDING
    output_path: Path | None = None
    output_rows: int = 0                 # Data lines written (header excluded)
    transformed: bool = False            # Attendance shape applied
    error: str | None = None             # Failure reason summary
