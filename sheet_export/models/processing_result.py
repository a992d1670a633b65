from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for a batch export run.

Aggregates the per-workbook outcomes into the counters printed on the
SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics (internal helper for ProcessingResult)."""
    file_name: str
    status: str  # success/failed/skipped
    output_rows: int
    elapsed_seconds: float
    transformed: bool = False


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one run."""
    success_files: int
    failed_files: int
    skipped_files: int
    total_output_rows: int
    transformed_files: int  # Files exported with the attendance shape
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files + self.skipped_files
