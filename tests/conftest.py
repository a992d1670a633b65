# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from sheet_export.logging.init import reset_logging
from sheet_export.models.table import Table


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
output_directory: ./out
format: csv
delimiter_policy: tab
suggestion:
  model: claude-haiku-4-5-20251001
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "export.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def write_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write an .xlsx where the first row of every sheet is the header row."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook() -> Callable[[Path, dict[str, list[list[object]]]], Path]:
    return write_workbook


ATTENDANCE_BG_ROWS: list[list[object]] = [
    ["Код на персонала", "Дата", "Първи вътре", "Последно излизане"],
    ["1001", "11/04/2025", "7:40", "16:23"],
    ["1002", "11/04/2025", "9:01", ""],
    ["1003", "11/04/2025", "", "17:05"],
]

CONTENT_ROWS: list[list[object]] = [
    ["ID", "Дата", "Вход", "Изход"],
    ["42", "1/2/2025", "8:00", "17:15"],
    ["43", "1/2/2025", "8:10", "17:00"],
    ["44", "2/2/2025", "7:55", "16:45"],
]

PLAIN_ROWS: list[list[object]] = [
    ["Name", "Order Date", "Amount", "Notes"],
    ["Alice", "3/1/2025", 120, "first order"],
    ["Bob", "4/1/2025", 80, ""],
]


@pytest.fixture()
def sheet_rows() -> dict[str, list[list[object]]]:
    """Raw sheet layouts (header row first) for workbook fixtures."""
    return {
        "attendance": [list(r) for r in ATTENDANCE_BG_ROWS],
        "content": [list(r) for r in CONTENT_ROWS],
        "plain": [list(r) for r in PLAIN_ROWS],
    }


@pytest.fixture()
def attendance_table() -> Table:
    """Name-based attendance layout with one row missing each time."""
    header, *rows = ATTENDANCE_BG_ROWS
    return Table(name="Sheet1", columns=list(header), rows=[dict(zip(header, r)) for r in rows])


@pytest.fixture()
def content_table() -> Table:
    """Attendance layout recognizable only from cell contents."""
    header, *rows = CONTENT_ROWS
    return Table(name="Sheet1", columns=list(header), rows=[dict(zip(header, r)) for r in rows])


@pytest.fixture()
def plain_table() -> Table:
    header, *rows = PLAIN_ROWS
    return Table(name="Orders", columns=list(header), rows=[dict(zip(header, r)) for r in rows])
