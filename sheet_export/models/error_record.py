from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

One record per failed workbook, written as a JSON Lines entry with a fixed
key set: timestamp, file, sheet, error_type, message.
"""

__all__ = [
    "ErrorRecord",
    "FILE_LEVEL_SHEET",
]

# Sheet placeholder for failures that happen before a sheet is chosen
FILE_LEVEL_SHEET = "<FILE_LEVEL>"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Source workbook file name
        sheet: Sheet name, or FILE_LEVEL_SHEET when unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str
    file: str
    sheet: str
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict keeps the key set fixed
        return json.dumps(asdict(self), ensure_ascii=False)
