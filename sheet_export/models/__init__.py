"""Domain models for the spreadsheet export tool.

This package contains the model classes shared by the reader, the export
pipeline, the orchestrator and the CLI.
"""

from .config_models import ExportConfig, SuggestionConfig
from .error_record import ErrorRecord
from .export_models import (
    AttendanceShape,
    ColumnRole,
    DelimiterPolicy,
    ExportFormat,
    ExportPayload,
    ExportRequest,
    OutputDocument,
)
from .processing_result import FileStat, ProcessingResult
from .table import Table
from .workbook_export import ExportStatus, WorkbookExport

__all__ = [
    # Configuration models
    "ExportConfig",
    "SuggestionConfig",
    # Pipeline models
    "Table",
    "ColumnRole",
    "AttendanceShape",
    "ExportFormat",
    "DelimiterPolicy",
    "ExportRequest",
    "OutputDocument",
    "ExportPayload",
    # Run models
    "ErrorRecord",
    "ExportStatus",
    "WorkbookExport",
    "FileStat",
    "ProcessingResult",
]
