from __future__ import annotations

import re
from pathlib import Path

from sheet_export.cli import main as cli_main

SUMMARY_RE = re.compile(
    r"^SUMMARY files=(\d+)/(\d+) success=(\d+) failed=(\d+) skipped=(\d+) "
    r"rows=(\d+) attendance=(\d+) elapsed_sec=(\d+(?:\.\d+)?)$"
)


def _summary_lines(out: str) -> list[str]:
    return [line for line in out.splitlines() if line.startswith("SUMMARY ")]


def test_summary_line_format(temp_workdir: Path, write_config, make_workbook, sheet_rows, capsys):
    """Exactly one SUMMARY line, printed last, with fixed key order."""
    make_workbook(temp_workdir / "data" / "att.xlsx", {"Sheet1": sheet_rows["attendance"]})
    make_workbook(temp_workdir / "data" / "orders.xlsx", {"Orders": sheet_rows["plain"]})
    (temp_workdir / "data" / "broken.xlsx").write_bytes(b"garbage")

    cli_main([])

    out = capsys.readouterr().out
    lines = _summary_lines(out)
    assert len(lines) == 1
    assert out.strip().splitlines()[-1] == lines[0]

    m = SUMMARY_RE.match(lines[0])
    assert m is not None
    total, total_again, success, failed, skipped, rows, attendance, _ = m.groups()
    assert total == total_again == "3"
    assert (success, failed, skipped) == ("2", "1", "0")
    assert rows == str(4 + 2)
    assert attendance == "1"


def test_summary_line_for_empty_run(temp_workdir: Path, write_config, capsys):
    cli_main([])

    [line] = _summary_lines(capsys.readouterr().out)
    assert SUMMARY_RE.match(line)
    assert line.startswith("SUMMARY files=0/0 success=0 failed=0 skipped=0 rows=0 attendance=0 ")
