from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..models.export_models import AttendanceShape, ColumnRole
from ..models.table import Table
from .classifier import is_date_value, is_time_value

"""Column shape detector for personnel attendance tables.

Two independent detectors run over the whole table (not the user's
selection):

1. content-based: samples the first rows and assigns each column a
   ColumnRole (time / date / identifier / unclassified)
2. name-based: bilingual keyword families matched against column names

Both verdicts are computed first, then ``resolve_shape`` picks the concrete
columns. A fully matched set of names wins over content roles; content roles
are used when names are only partially recognized.
"""

__all__ = [
    "SAMPLE_SIZE",
    "MAJORITY_RATIO",
    "FIRST_IN_KEYWORDS",
    "LAST_OUT_KEYWORDS",
    "PERSONNEL_CODE_KEYWORDS",
    "DATE_KEYWORDS",
    "ContentDetection",
    "NameDetection",
    "detect_by_content",
    "detect_by_name",
    "should_transform",
    "resolve_shape",
    "detect_shape",
    "is_date_column_name",
]

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5
MAJORITY_RATIO = 0.6

# Lower-cased keywords, matched as substrings of the case-folded column name
FIRST_IN_KEYWORDS = ("първи вътре", "first in", "first")
LAST_OUT_KEYWORDS = ("последно излизане", "last out", "last")
PERSONNEL_CODE_KEYWORDS = ("кодекс на персонала", "код на персонала", "personnel", "code")
DATE_KEYWORDS = ("дата", "date")


def _matches(column: str, keywords: tuple[str, ...]) -> bool:
    name = column.casefold()
    return any(k in name for k in keywords)


def _first_match(columns: list[str], keywords: tuple[str, ...]) -> str | None:
    for col in columns:
        if _matches(col, keywords):
            return col
    return None


def is_date_column_name(column: str) -> bool:
    """True for column names carrying the date keyword ("date" / "дата", any case)."""
    return _matches(column, DATE_KEYWORDS)


def _is_present(value: Any) -> bool:
    return value is not None and value != ""


@dataclass(frozen=True)
class ContentDetection:
    """Per-column roles assigned from sampled values, in column order."""
    roles: dict[str, ColumnRole] = field(default_factory=dict)

    def columns_with(self, role: ColumnRole) -> list[str]:
        return [col for col, r in self.roles.items() if r is role]

    @property
    def time_columns(self) -> list[str]:
        return self.columns_with(ColumnRole.TIME)

    @property
    def date_columns(self) -> list[str]:
        return self.columns_with(ColumnRole.DATE)

    @property
    def identifier_columns(self) -> list[str]:
        return self.columns_with(ColumnRole.IDENTIFIER)

    @property
    def matches_shape(self) -> bool:
        return (
            len(self.time_columns) == 2
            and len(self.date_columns) >= 1
            and len(self.identifier_columns) >= 1
        )


@dataclass(frozen=True)
class NameDetection:
    """First column name matched by each keyword family (None if absent)."""
    first_in: str | None = None
    last_out: str | None = None
    personnel_code: str | None = None
    date: str | None = None

    @property
    def complete(self) -> bool:
        return None not in (self.first_in, self.last_out, self.personnel_code, self.date)


def detect_by_content(columns: list[str], rows: list[dict[str, Any]]) -> ContentDetection:
    """Classify each column from the first SAMPLE_SIZE rows.

    A column is TIME when at least 60% of the sample looks like H:MM, else
    DATE when at least 60% looks like D/M/YYYY. Otherwise it is IDENTIFIER
    when the value in the last sampled row is non-empty. Only that one value
    is inspected, so the outcome depends on which row closes the sample.
    """
    sample = rows[:SAMPLE_SIZE]
    sample_size = len(sample)
    if sample_size == 0:
        return ContentDetection()

    threshold = sample_size * MAJORITY_RATIO
    roles: dict[str, ColumnRole] = {}
    for col in columns:
        values = [row.get(col, "") for row in sample]
        time_count = sum(1 for v in values if is_time_value(v))
        date_count = sum(1 for v in values if is_date_value(v))

        if time_count >= threshold:
            roles[col] = ColumnRole.TIME
        elif date_count >= threshold:
            roles[col] = ColumnRole.DATE
        elif _is_present(values[-1]):
            roles[col] = ColumnRole.IDENTIFIER
        else:
            roles[col] = ColumnRole.UNCLASSIFIED
    return ContentDetection(roles=roles)


def detect_by_name(columns: list[str]) -> NameDetection:
    return NameDetection(
        first_in=_first_match(columns, FIRST_IN_KEYWORDS),
        last_out=_first_match(columns, LAST_OUT_KEYWORDS),
        personnel_code=_first_match(columns, PERSONNEL_CODE_KEYWORDS),
        date=_first_match(columns, DATE_KEYWORDS),
    )


def should_transform(content: ContentDetection, names: NameDetection) -> bool:
    return content.matches_shape or names.complete


def resolve_shape(
    columns: list[str], content: ContentDetection, names: NameDetection
) -> AttendanceShape:
    """Pick the concrete column for each role.

    Precondition: ``should_transform(content, names)`` is true and
    ``columns`` is non-empty.
    """
    if names.complete:
        # complete implies every name slot is set
        return AttendanceShape(
            identifier_column=names.personnel_code,  # type: ignore[arg-type]
            date_column=names.date,  # type: ignore[arg-type]
            first_time_column=names.first_in,
            second_time_column=names.last_out,
        )

    time_cols = content.time_columns
    date_cols = content.date_columns
    id_cols = content.identifier_columns

    date_column = (
        date_cols[0]
        if date_cols
        else next((c for c in columns if "date" in c.casefold()), columns[0])
    )
    identifier_column = (
        id_cols[0]
        if id_cols
        else next(
            (c for c in columns if c not in time_cols and c not in date_cols),
            columns[0],
        )
    )
    return AttendanceShape(
        identifier_column=identifier_column,
        date_column=date_column,
        first_time_column=time_cols[0] if len(time_cols) > 0 else None,
        second_time_column=time_cols[1] if len(time_cols) > 1 else None,
    )


def detect_shape(table: Table) -> AttendanceShape | None:
    """Run both detectors on ``table``; None means export by projection."""
    if not table.columns:
        return None
    content = detect_by_content(table.columns, table.rows)
    names = detect_by_name(table.columns)
    if not should_transform(content, names):
        logger.debug(
            "table=%s no attendance shape (time=%d date=%d id=%d names_complete=%s)",
            table.name,
            len(content.time_columns),
            len(content.date_columns),
            len(content.identifier_columns),
            names.complete,
        )
        return None

    shape = resolve_shape(table.columns, content, names)
    logger.debug(
        "table=%s attendance shape via %s: id=%s date=%s first=%s second=%s",
        table.name,
        "names" if names.complete else "content",
        shape.identifier_column,
        shape.date_column,
        shape.first_time_column,
        shape.second_time_column,
    )
    return shape
