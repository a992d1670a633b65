from __future__ import annotations

import csv
import io
import re
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.export_models import ExportPayload, ExportRequest, OutputDocument
from .classifier import cell_text

"""Delimited text serializer.

Output layout:
- a UTF-8 byte-order mark so spreadsheet applications detect the encoding
- one header line, then one line per row, separated by "\\n"
- fields joined by the request's delimiter (tab unless the legacy policy
  asks for comma on csv), quoted only when they contain the delimiter, a
  quote or a line break
"""

__all__ = [
    "BOM",
    "render_delimited",
    "export_file_name",
    "serialize_document",
    "write_payload",
]

BOM = "\ufeff"
LINE_TERMINATOR = "\n"

_FINAL_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def _field(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return cell_text(value)


def _render_single_column(column: str, values: list[str], delimiter: str) -> str:
    # csv.writer (used by to_csv as well) writes a lone empty field as '""';
    # an empty value in a one-column export is an empty line instead
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, lineterminator=LINE_TERMINATOR)
    for value in [column, *values]:
        if value == "":
            buf.write(LINE_TERMINATOR)
        else:
            writer.writerow([value])
    return buf.getvalue()


def render_delimited(document: OutputDocument, delimiter: str) -> str:
    """Render header + rows without the BOM and without a trailing newline."""
    if not document.columns:
        return ""
    records = [[_field(row.get(col, "")) for col in document.columns] for row in document.rows]
    if len(document.columns) == 1:
        text = _render_single_column(document.columns[0], [r[0] for r in records], delimiter)
    else:
        df = pd.DataFrame(records, columns=document.columns, dtype=object)
        text = df.to_csv(sep=delimiter, index=False, lineterminator=LINE_TERMINATOR)
    # the last record is closed with a terminator; drop exactly that one
    if text.endswith(LINE_TERMINATOR):
        text = text[: -len(LINE_TERMINATOR)]
    return text


def export_file_name(source_name: str, request: ExportRequest) -> str:
    """report.xlsx -> report.csv (only the final extension is replaced)."""
    base = _FINAL_EXTENSION_RE.sub("", Path(source_name).name)
    return f"{base}.{request.format.extension}"


def serialize_document(
    document: OutputDocument, request: ExportRequest, source_name: str
) -> ExportPayload:
    return ExportPayload(
        file_name=export_file_name(source_name, request),
        mime_type=request.format.mime_type,
        text=BOM + render_delimited(document, request.delimiter),
        row_count=len(document.rows),
        transformed=document.transformed,
    )


def write_payload(payload: ExportPayload, output_directory: Path) -> Path:
    """Save ``payload`` under ``output_directory`` and return the file path."""
    output_directory.mkdir(parents=True, exist_ok=True)
    target = output_directory / payload.file_name
    target.write_bytes(payload.to_bytes())
    return target
