from __future__ import annotations

import re
from typing import Any

"""Scalar value classifier.

Format-only checks used by the column shape detector. No clock range or
calendar validity checks are made: "25:61" is a time, "99/99/9999" a date.
"""

__all__ = [
    "is_time_value",
    "is_date_value",
    "transform_date",
    "cell_text",
]

_TIME_RE = re.compile(r"^\d{1,2}:\d{2}$")  # 7:40, 16:23, 09:01
_DATE_SLASH_RE = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")  # 12/9/2025
_DATE_DOT_RE = re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}$")  # already normalized


def cell_text(value: Any) -> str:
    """String form of a cell, empty for None and NaN."""
    if value is None:
        return ""
    if isinstance(value, float) and value != value:
        return ""
    return str(value)


def is_time_value(value: Any) -> bool:
    return bool(_TIME_RE.match(cell_text(value).strip()))


def is_date_value(value: Any) -> bool:
    text = cell_text(value).strip()
    return bool(_DATE_SLASH_RE.match(text) or _DATE_DOT_RE.match(text))


def transform_date(value: Any) -> Any:
    """Rewrite 11/04/2025 as 11.04.2025. Falsy input is returned as is."""
    if not value:
        return value
    return str(value).replace("/", ".")
