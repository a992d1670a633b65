from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, default_config, load_config
from ..excel.reader import ReaderError, read_workbook
from ..export.detector import detect_by_content, detect_by_name, detect_shape
from ..logging.init import enable_debug, log_summary, setup_logging
from ..models.config_models import ExportConfig
from ..models.export_models import DelimiterPolicy, ExportFormat
from ..models.table import Table
from ..services.orchestrator import ProcessingError, Suggester, process_all, scan_workbooks
from ..services.suggest import ColumnSuggestion, suggest_columns
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env (ANTHROPIC_API_KEY for --suggest)
- load config/export.yml and apply command line overrides
- export every workbook of source_directory (or the --file list)
- print the SUMMARY line and map the outcome to an exit code
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; values in the file win over the environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _split_columns(raw: str) -> list[str]:
    return [c.strip() for c in raw.split(",") if c.strip()]


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Spreadsheet -> delimited text exporter")
    p.add_argument("--config", help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument(
        "--file",
        action="append",
        metavar="PATH",
        help="Workbook to export (repeatable); skips scanning source_directory",
    )
    p.add_argument("--sheet", help="Sheet to export (default: first readable sheet)")
    p.add_argument(
        "--columns",
        type=_split_columns,
        help="Comma separated column selection, in output order (default: all columns)",
    )
    p.add_argument("--format", choices=[f.value for f in ExportFormat], help="Output format")
    p.add_argument(
        "--delimiter-policy",
        choices=[d.value for d in DelimiterPolicy],
        help="tab: tab for csv and txt; legacy: comma for csv, tab for txt",
    )
    p.add_argument("--output-dir", help="Directory for exported files")
    p.add_argument("--suggest", action="store_true", help="Pre-select columns with the hosted model")
    p.add_argument("--inspect-data", action="store_true", help="Print sheets, columns, sample rows and detected roles then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _apply_overrides(cfg: ExportConfig, args: argparse.Namespace) -> ExportConfig:
    return cfg.with_overrides(
        output_directory=args.output_dir,
        format=ExportFormat(args.format) if args.format else None,
        delimiter_policy=DelimiterPolicy(args.delimiter_policy) if args.delimiter_policy else None,
        sheet=args.sheet,
        columns=args.columns,
    )


def _make_suggester(cfg: ExportConfig) -> Suggester:
    def suggester(table: Table) -> ColumnSuggestion:
        return suggest_columns(table, model_name=cfg.suggestion.model)

    return suggester


def _print_table(table: Table) -> None:
    print(f"  SHEET: {table.name} rows={table.row_count} cols={table.columns}")
    print("    sample_rows=", table.sample(INSPECT_SAMPLE_ROWS))
    content = detect_by_content(table.columns, table.rows)
    roles = {col: role.value for col, role in content.roles.items()}
    print(f"    roles={roles}")
    names = detect_by_name(table.columns)
    print(
        f"    names: first_in={names.first_in} last_out={names.last_out} "
        f"personnel_code={names.personnel_code} date={names.date}"
    )
    shape = detect_shape(table)
    if shape is None:
        print("    shape=projection")
    else:
        print(
            f"    shape=attendance id={shape.identifier_column} date={shape.date_column} "
            f"first={shape.first_time_column} second={shape.second_time_column}"
        )


def _inspect_data(cfg: ExportConfig, files: list[Path] | None) -> int:
    if files is None:
        try:
            files = scan_workbooks(Path(cfg.source_directory or "."))
        except ProcessingError as e:
            print(f"inspect: {e}")
            return EXIT_FATAL
    if not files:
        print("inspect: no workbooks")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            tables = read_workbook(f)
        except ReaderError as e:
            print(f"  read_error: {e}")
            continue
        for table in tables:
            _print_table(table)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read sys.argv when argv is None: main([]) must not pick up pytest flags
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        enable_debug()

    config_path = Path(args.config) if args.config else DEFAULT_CONFIG_PATH
    files = [Path(f) for f in args.file] if args.file else None
    try:
        if files is not None and not config_path.exists():
            cfg = default_config()
        else:
            cfg = load_config(config_path)
    except ConfigError as e:
        logger.error("config: %s", e)
        return EXIT_FATAL
    cfg = _apply_overrides(cfg, args)

    if files is None:
        directory = Path(cfg.source_directory or "")
        if not cfg.source_directory or not directory.exists():
            logger.error("directory not found: %s", directory)
            return EXIT_FATAL
        logger.info("Exporting files from: %s", directory)

    if args.inspect_data:
        return _inspect_data(cfg, files)

    logger.debug(
        "format=%s delimiter_policy=%s output=%s",
        cfg.format.value,
        cfg.delimiter_policy.value,
        cfg.output_directory,
    )
    suggester = _make_suggester(cfg) if args.suggest else None
    try:
        result = process_all(cfg, files=files, suggester=suggester)
    except ProcessingError as e:
        logger.error("processing: %s", e)
        return EXIT_FATAL

    summary_line = render_summary_line(result.total_files, result)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
