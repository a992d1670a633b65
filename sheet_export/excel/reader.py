from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.table import Table

"""Workbook reader.

Turns an .xlsx / .xls workbook into Table objects:
- first row of each sheet is the header
- fully blank rows are skipped; sheets without data rows are skipped
- blank cells become "" so every row carries every header column
- time and date cells are rendered as H:MM and D/M/YYYY, the text forms the
  attendance detector recognizes
"""

__all__ = [
    "SUPPORTED_SUFFIXES",
    "ReaderError",
    "UnsupportedFileError",
    "WorkbookReadError",
    "NoReadableSheetsError",
    "read_workbook",
    "sheet_to_table",
    "cell_value",
]

# suffix -> pandas engine
SUPPORTED_SUFFIXES = {
    ".xlsx": "openpyxl",
    ".xls": "xlrd",
}


class ReaderError(Exception):
    """Base class for workbook read failures."""


class UnsupportedFileError(ReaderError):
    """Raised when the file suffix is not a supported workbook type."""


class WorkbookReadError(ReaderError):
    """Raised when the workbook cannot be opened or a sheet cannot be parsed."""


class NoReadableSheetsError(ReaderError):
    """Raised when no sheet of the workbook has a header and a data row."""


def _format_time(value: dt.time) -> str:
    return f"{value.hour}:{value.minute:02d}"


def cell_value(value: Any) -> Any:
    """Normalize one raw pandas cell."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dt.time):
        return _format_time(value)
    if isinstance(value, (pd.Timestamp, dt.datetime)):
        if pd.isna(value):
            return ""
        text = f"{value.day}/{value.month}/{value.year}"
        if value.hour or value.minute:
            text += f" {_format_time(value.time())}"
        return text
    if isinstance(value, dt.date):
        return f"{value.day}/{value.month}/{value.year}"
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return int(value)
        return value
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return ""
    return value


def sheet_to_table(df: pd.DataFrame, sheet_name: str) -> Table | None:
    """Build a Table from a sheet parsed with header=0 (None if no data rows)."""
    columns = [str(c) for c in df.columns]
    if not columns:
        return None
    rows: list[dict[str, Any]] = []
    for raw in df.itertuples(index=False, name=None):
        values = [cell_value(v) for v in raw]
        if all(v == "" for v in values):
            continue
        rows.append(dict(zip(columns, values, strict=False)))
    if not rows:
        return None
    return Table(name=sheet_name, columns=columns, rows=rows)


def read_workbook(path: Path) -> list[Table]:
    """Read every sheet of ``path`` that has a header and at least one data row.

    Raises:
        UnsupportedFileError: suffix is not .xlsx / .xls
        WorkbookReadError: the engine failed to open or parse the workbook
        NoReadableSheetsError: no sheet produced a table
    """
    engine = SUPPORTED_SUFFIXES.get(path.suffix.lower())
    if engine is None:
        raise UnsupportedFileError(f"unsupported file type: {path.name}")

    tables: list[Table] = []
    try:
        with pd.ExcelFile(path, engine=engine) as xls:
            for name in xls.sheet_names:
                df = xls.parse(name, header=0, dtype=object)
                table = sheet_to_table(df, str(name))
                if table is not None:
                    tables.append(table)
    except ReaderError:
        raise
    except Exception as e:
        raise WorkbookReadError(f"failed to read {path.name}: {e}") from e

    if not tables:
        raise NoReadableSheetsError(f"no readable sheets in {path.name}")
    return tables
