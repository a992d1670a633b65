from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from .export_models import DelimiterPolicy, ExportFormat

"""Config dataclasses for the spreadsheet export tool.

Built by sheet_export.config.loader from config/export.yml; CLI flags are
applied on top with ``ExportConfig.with_overrides``.
"""

DEFAULT_OUTPUT_DIRECTORY = "./out"
DEFAULT_SUGGESTION_MODEL = "claude-haiku-4-5-20251001"


@dataclass(frozen=True)
class SuggestionConfig:
    """Hosted model settings for column suggestions.

    The API key is never stored here; it comes from ANTHROPIC_API_KEY.
    """
    model: str = DEFAULT_SUGGESTION_MODEL


@dataclass(frozen=True)
class ExportConfig:
    """Root configuration object for an export run."""
    source_directory: str | None  # Directory scanned for workbooks (None: explicit files only)
    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    format: ExportFormat = ExportFormat.CSV
    delimiter_policy: DelimiterPolicy = DelimiterPolicy.TAB
    sheet: str | None = None  # None -> first readable sheet
    columns: list[str] = field(default_factory=list)  # Empty -> all table columns
    suggestion: SuggestionConfig = field(default_factory=SuggestionConfig)

    def with_overrides(self, **overrides: Any) -> ExportConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)
