from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import (
    SUPPORTED_SUFFIXES,
    NoReadableSheetsError,
    ReaderError,
    UnsupportedFileError,
    read_workbook,
)
from ..export.serializer import serialize_document, write_payload
from ..export.transformer import transform_for_export
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ExportConfig
from ..models.error_record import FILE_LEVEL_SHEET, ErrorRecord
from ..models.export_models import ExportPayload, ExportRequest
from ..models.processing_result import FileStat, ProcessingResult
from ..models.table import Table
from ..models.workbook_export import ExportStatus, WorkbookExport
from .progress import ProgressTracker
from .suggest import ColumnSuggestion, SuggestionError

"""Export orchestration.

A run exports one table per workbook:
1. read the workbook, pick the configured sheet (default: first readable)
2. choose the column selection (suggestion, configured list, or all columns)
3. transform + serialize, write <stem>.<format> into the output directory
4. record failures and aggregate a ProcessingResult

A failing workbook never stops the run; it is logged, recorded in the error
log and counted as failed.
"""

logger = logging.getLogger(__name__)

Suggester = Callable[[Table], ColumnSuggestion]


class ProcessingError(Exception):
    """Fatal run errors (source directory missing or unreadable)."""


class SheetNotFoundError(ProcessingError):
    """Raised when the configured sheet is not among the readable sheets."""


def scan_workbooks(directory: Path) -> list[Path]:
    """List supported workbooks in ``directory`` (non-recursive, sorted by name).

    Office lock files (``~$name.xlsx``) are ignored.

    Raises:
        ProcessingError: directory missing, not a directory, or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        found = [
            p
            for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES and not p.name.startswith("~$")
        ]
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e
    return sorted(found, key=lambda p: p.name)


def select_table(tables: list[Table], sheet: str | None) -> Table:
    if sheet is None:
        return tables[0]
    for table in tables:
        if table.name == sheet:
            return table
    available = ", ".join(t.name for t in tables)
    raise SheetNotFoundError(f"sheet '{sheet}' not found (available: {available})")


def resolve_selection(table: Table, columns: Iterable[str]) -> list[str]:
    """Ordered selection restricted to the table's columns.

    An empty ``columns`` selects every column in header order. Unknown names
    are dropped, so the result can be empty.
    """
    requested = list(columns)
    if not requested:
        return list(table.columns)
    known = set(table.columns)
    selection: list[str] = []
    for col in requested:
        if col in known and col not in selection:
            selection.append(col)
    return selection


def export_table(table: Table, request: ExportRequest, source_name: str) -> ExportPayload:
    """Transform and serialize one table. Pure: no I/O, ``table`` untouched."""
    document = transform_for_export(table, request.columns)
    return serialize_document(document, request, source_name)


def _choose_columns(
    table: Table, config: ExportConfig, suggester: Suggester | None, file_name: str
) -> list[str]:
    if suggester is not None:
        try:
            suggestion = suggester(table)
        except SuggestionError as e:
            logger.warning("%s: column suggestion failed, using configured selection: %s", file_name, e)
        else:
            if suggestion.summary:
                logger.info("%s: %s", file_name, suggestion.summary)
            if suggestion.suggested_columns:
                logger.info("%s: suggested columns %s", file_name, suggestion.suggested_columns)
                return list(suggestion.suggested_columns)
            logger.info("%s: no usable column suggestions, using configured selection", file_name)
    return resolve_selection(table, config.columns)


def _failed(
    path: Path,
    start: datetime,
    error_log: ErrorLogBuffer,
    error_type: str,
    message: str,
    sheet: str | None = None,
) -> WorkbookExport:
    logger.error("%s: %s", path.name, message)
    error_log.append(
        ErrorRecord.create(
            file=path.name,
            sheet=sheet or FILE_LEVEL_SHEET,
            error_type=error_type,
            message=message,
        )
    )
    return WorkbookExport(
        path=path,
        name=path.name,
        sheet=sheet,
        start_time=start,
        end_time=datetime.now(UTC),
        status=ExportStatus.FAILED,
        error=message,
    )


def export_workbook(
    path: Path,
    config: ExportConfig,
    error_log: ErrorLogBuffer,
    suggester: Suggester | None = None,
    claimed_outputs: set[str] | None = None,
) -> WorkbookExport:
    """Export one workbook according to ``config``; never raises for file-level problems.

    ``claimed_outputs`` holds the (case-folded) output file names already
    written in this run. A workbook whose output name is taken fails with
    DUPLICATE_OUTPUT instead of overwriting the earlier file.
    """
    start = datetime.now(UTC)

    try:
        tables = read_workbook(path)
    except UnsupportedFileError as e:
        return _failed(path, start, error_log, "UNSUPPORTED_FILE", str(e))
    except NoReadableSheetsError as e:
        return _failed(path, start, error_log, "NO_READABLE_SHEETS", str(e))
    except ReaderError as e:
        return _failed(path, start, error_log, "READ_ERROR", str(e))

    try:
        table = select_table(tables, config.sheet)
    except SheetNotFoundError as e:
        return _failed(path, start, error_log, "SHEET_NOT_FOUND", str(e), sheet=config.sheet)

    columns = _choose_columns(table, config, suggester, path.name)
    if not columns:
        logger.warning("%s: no selected column exists in sheet '%s', skipped", path.name, table.name)
        return WorkbookExport(
            path=path,
            name=path.name,
            sheet=table.name,
            start_time=start,
            end_time=datetime.now(UTC),
            status=ExportStatus.SKIPPED,
        )

    request = ExportRequest(
        columns=columns,
        format=config.format,
        delimiter_policy=config.delimiter_policy,
    )
    payload = export_table(table, request, path.name)

    output_key = payload.file_name.casefold()
    if claimed_outputs is not None and output_key in claimed_outputs:
        return _failed(
            path,
            start,
            error_log,
            "DUPLICATE_OUTPUT",
            f"output {payload.file_name} already written by another workbook in this run",
            sheet=table.name,
        )

    try:
        output_path = write_payload(payload, Path(config.output_directory))
    except OSError as e:
        return _failed(path, start, error_log, "WRITE_ERROR", f"failed to write {payload.file_name}: {e}", sheet=table.name)

    if claimed_outputs is not None:
        claimed_outputs.add(output_key)

    shape_label = "attendance" if payload.transformed else "projection"
    logger.info("%s: sheet=%s %s rows=%d -> %s", path.name, table.name, shape_label, payload.row_count, output_path)
    return WorkbookExport(
        path=path,
        name=path.name,
        sheet=table.name,
        start_time=start,
        end_time=datetime.now(UTC),
        status=ExportStatus.SUCCESS,
        output_path=output_path,
        output_rows=payload.row_count,
        transformed=payload.transformed,
    )


def process_all(
    config: ExportConfig,
    files: list[Path] | None = None,
    suggester: Suggester | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Export every workbook of the run.

    Args:
        config: export configuration (CLI overrides already applied)
        files: explicit workbooks; None scans ``config.source_directory``
        suggester: optional column suggester used for pre-selection
        error_log: buffer for failures, flushed once at the end of the run

    Raises:
        ProcessingError: source directory missing/unreadable, or neither files
            nor a source directory were given
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    if files is None:
        if not config.source_directory:
            raise ProcessingError("no source directory configured and no files given")
        file_paths = scan_workbooks(Path(config.source_directory))
    else:
        file_paths = list(files)

    file_stats: list[FileStat] = []
    claimed_outputs: set[str] = set()
    success_count = 0
    failed_count = 0
    skipped_count = 0
    transformed_count = 0
    total_rows = 0

    with ProgressTracker(len(file_paths), description="Exporting files") as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            if not file_path.exists():
                outcome = _failed(
                    file_path, datetime.now(UTC), error_log, "FILE_NOT_FOUND", f"file not found: {file_path}"
                )
            else:
                outcome = export_workbook(file_path, config, error_log, suggester, claimed_outputs)

            if outcome.status is ExportStatus.SUCCESS:
                success_count += 1
                total_rows += outcome.output_rows
                if outcome.transformed:
                    transformed_count += 1
            elif outcome.status is ExportStatus.SKIPPED:
                skipped_count += 1
            else:
                failed_count += 1

            progress.set_postfix(success=success_count, failed=failed_count, rows=total_rows)
            progress.finish_file()

            elapsed = 0.0
            if outcome.start_time is not None and outcome.end_time is not None:
                elapsed = (outcome.end_time - outcome.start_time).total_seconds()
            file_stats.append(
                FileStat(
                    file_name=file_path.name,
                    status=outcome.status.value,
                    output_rows=outcome.output_rows,
                    elapsed_seconds=elapsed,
                    transformed=outcome.transformed,
                )
            )

    try:
        log_path = error_log.flush()
    except OSError as e:
        logger.warning("failed to write error log: %s", e)
    else:
        if log_path is not None:
            logger.info("error log written: %s", log_path)

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        skipped_files=skipped_count,
        total_output_rows=total_rows,
        transformed_files=transformed_count,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
