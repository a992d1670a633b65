from __future__ import annotations

from typing import Any

from ..models.export_models import AttendanceShape, OutputDocument
from ..models.table import Table
from .classifier import cell_text, transform_date
from .detector import detect_shape, is_date_column_name

"""Row transformer.

Attendance tables are rewritten from one wide row (code, date, first in,
last out) into up to two narrow rows (code, date, time). Any other table is
projected onto the selected columns with date columns normalized from
D/M/YYYY to D.M.YYYY.
"""

__all__ = [
    "CODE_HEADER",
    "DATE_HEADER",
    "TIME_HEADER",
    "ATTENDANCE_COLUMNS",
    "transform_for_export",
    "project_selection",
    "split_attendance_rows",
]

# Attendance output schema; downstream consumers rely on this exact order
CODE_HEADER = "Код на персонала"
DATE_HEADER = "Дата"
TIME_HEADER = "време"
ATTENDANCE_COLUMNS = (CODE_HEADER, DATE_HEADER, TIME_HEADER)


def project_selection(rows: list[dict[str, Any]], columns: list[str]) -> OutputDocument:
    """One output row per input row over ``columns``, in selection order."""
    date_columns = {col for col in columns if is_date_column_name(col)}
    out_rows: list[dict[str, Any]] = []
    for row in rows:
        new_row: dict[str, Any] = {}
        for col in columns:
            value = row.get(col, "")
            if col in date_columns:
                new_row[col] = transform_date(cell_text(value))
            else:
                new_row[col] = "" if value is None else value
        out_rows.append(new_row)
    return OutputDocument(columns=list(columns), rows=out_rows)


def _time_text(row: dict[str, Any], column: str | None) -> str:
    if not column:
        return ""
    return cell_text(row.get(column, "")).strip()


def split_attendance_rows(rows: list[dict[str, Any]], shape: AttendanceShape) -> OutputDocument:
    """Emit one (code, date, time) row per populated time slot.

    The first-time row of an input row always precedes its second-time row.
    """
    out_rows: list[dict[str, Any]] = []
    for row in rows:
        code = cell_text(row.get(shape.identifier_column, "")).strip()
        date = transform_date(cell_text(row.get(shape.date_column, "")))
        for time_column in (shape.first_time_column, shape.second_time_column):
            time = _time_text(row, time_column)
            if time:
                out_rows.append({CODE_HEADER: code, DATE_HEADER: date, TIME_HEADER: time})
    return OutputDocument(columns=list(ATTENDANCE_COLUMNS), rows=out_rows, shape=shape)


def transform_for_export(table: Table, columns: list[str]) -> OutputDocument:
    """Transform ``table`` for export.

    Shape detection always looks at every column of the table. When an
    attendance shape is found the selection is ignored and the fixed
    three-column schema is produced.
    """
    shape = detect_shape(table)
    if shape is None:
        return project_selection(table.rows, columns)
    return split_attendance_rows(table.rows, shape)
