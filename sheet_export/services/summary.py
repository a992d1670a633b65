from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very short runs
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(total_files: int, result: ProcessingResult) -> str:
    """Render the last line of a run.

    Format:
    SUMMARY files={total}/{total} success={success} failed={failed}
    skipped={skipped} rows={rows} attendance={transformed} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2025, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, skipped_files=0,
        ...     total_output_rows=40, transformed_files=1,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY files=1/1 success=1 failed=0 skipped=0 rows=40 attendance=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"skipped={result.skipped_files} "
        f"rows={result.total_output_rows} "
        f"attendance={result.transformed_files} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
