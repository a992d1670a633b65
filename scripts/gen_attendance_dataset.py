#!/usr/bin/env python3
"""Generate synthetic personnel attendance workbooks for manual runs.

Each sheet gets one header row and one row per employee and day:
- personnel code, date (D/M/YYYY text), first in, last out (H:MM text)
- a share of rows with a missing first in or last out time

Headers are Bulgarian by default;
``--english`` writes "Personnel Code / Date / First In / Last Out".
"""
from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from pathlib import Path

import numpy as np
import pandas as pd

BG_HEADERS = ["Код на персонала", "Дата", "Първи вътре", "Последно излизане"]
EN_HEADERS = ["Personnel Code", "Date", "First In", "Last Out"]


def _clock(minutes: int) -> str:
    return f"{minutes // 60}:{minutes % 60:02d}"


def generate_attendance(
    employees: int,
    days: int,
    start: date,
    missing_ratio: float = 0.05,
    seed: int = 42,
    headers: list[str] | None = None,
) -> pd.DataFrame:
    """Build an attendance DataFrame with ``employees * days`` rows.

    Args:
        employees: number of personnel codes
        days: consecutive days starting at ``start``
        start: first day
        missing_ratio: share of rows with one of the two times left blank
        seed: random seed for reproducible data
        headers: four column names (code, date, first in, last out)
    """
    rng = np.random.default_rng(seed)
    cols = headers or BG_HEADERS
    codes = [str(1000 + i) for i in range(employees)]

    records: list[list[str]] = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        day_text = f"{day.day}/{day.month}/{day.year}"
        for code in codes:
            first_in = _clock(int(rng.integers(7 * 60, 9 * 60 + 30)))
            last_out = _clock(int(rng.integers(16 * 60, 19 * 60)))
            if rng.random() < missing_ratio:
                if rng.random() < 0.5:
                    first_in = ""
                else:
                    last_out = ""
            records.append([code, day_text, first_in, last_out])

    return pd.DataFrame(records, columns=cols)


def create_workbook(output_path: Path, frames: dict[str, pd.DataFrame]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for sheet_name, df in frames.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)

    print(f"Created workbook: {output_path}")
    for sheet_name, df in frames.items():
        print(f"  {sheet_name}: {len(df):,} rows")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic attendance workbooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 20 employees over 30 days
  %(prog)s data/attendance.xlsx

  # Bigger file with English headers
  %(prog)s data/big.xlsx --employees 500 --days 60 --english
        """,
    )
    parser.add_argument("output", type=Path, help="Output .xlsx path")
    parser.add_argument("--employees", type=int, default=20, help="Number of employees (default: 20)")
    parser.add_argument("--days", type=int, default=30, help="Number of days (default: 30)")
    parser.add_argument("--start", type=date.fromisoformat, default=date(2025, 1, 1), help="First day, YYYY-MM-DD")
    parser.add_argument("--missing-ratio", type=float, default=0.05, help="Share of rows with one time missing")
    parser.add_argument("--sheet", default="Attendance", help="Sheet name (default: Attendance)")
    parser.add_argument("--english", action="store_true", help="Use English headers")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.employees <= 0 or args.days <= 0:
        print("Error: --employees and --days must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.missing_ratio <= 1.0:
        print("Error: --missing-ratio must be between 0 and 1", file=sys.stderr)
        return 1

    df = generate_attendance(
        args.employees,
        args.days,
        args.start,
        missing_ratio=args.missing_ratio,
        seed=args.seed,
        headers=EN_HEADERS if args.english else BG_HEADERS,
    )
    create_workbook(args.output, {args.sheet: df})
    return 0


if __name__ == "__main__":
    sys.exit(main())
