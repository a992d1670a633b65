from __future__ import annotations

import json
from pathlib import Path

from sheet_export.cli import main as cli_main


def test_partial_failure_writes_error_log(temp_workdir: Path, write_config, make_workbook, sheet_rows, capsys):
    """One unreadable and one sheet-less workbook fail; the good one is still exported."""
    data_dir = temp_workdir / "data"
    make_workbook(data_dir / "a_good.xlsx", {"Sheet1": sheet_rows["attendance"]})
    (data_dir / "b_corrupt.xlsx").write_bytes(b"not really a workbook")
    make_workbook(data_dir / "c_headers_only.xlsx", {"Sheet1": [["ID", "Date"]]})

    code = cli_main([])

    out = capsys.readouterr().out
    assert code == 2
    assert (temp_workdir / "out" / "a_good.csv").exists()
    assert not (temp_workdir / "out" / "b_corrupt.csv").exists()
    assert "SUMMARY files=3/3 success=1 failed=2 skipped=0 rows=4 attendance=1" in out

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    records = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert [(r["file"], r["error_type"]) for r in records] == [
        ("b_corrupt.xlsx", "READ_ERROR"),
        ("c_headers_only.xlsx", "NO_READABLE_SHEETS"),
    ]
    assert all(r["sheet"] == "<FILE_LEVEL>" for r in records)
    assert f"INFO error log written: logs/{logs[0].name}" in out


def test_success_run_writes_no_error_log(temp_workdir: Path, write_config, make_workbook, sheet_rows):
    make_workbook(temp_workdir / "data" / "a.xlsx", {"Sheet1": sheet_rows["attendance"]})

    assert cli_main([]) == 0
    assert list((temp_workdir / "logs").glob("errors-*.log")) == []
