from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_OUTPUT_DIRECTORY,
    DEFAULT_SUGGESTION_MODEL,
    ExportConfig,
    SuggestionConfig,
)
from ..models.export_models import DelimiterPolicy, ExportFormat

"""Config loader.

Responsibilities:
- Load YAML config/export.yml
- Validate against config_schema.json (shipped next to this module)
- Apply defaults (output ./out, format csv, delimiter policy tab)
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "load_config",
    "default_config",
]

DEFAULT_CONFIG_PATH = Path("config/export.yml")
SCHEMA_PATH = Path(__file__).parent / "config_schema.json"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or data not matching it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def default_config() -> ExportConfig:
    """Configuration used when only explicit files are exported."""
    return ExportConfig(source_directory=None)


def load_config(path: Path) -> ExportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    suggestion_raw = data.get("suggestion") or {}
    return ExportConfig(
        source_directory=data["source_directory"],
        output_directory=data.get("output_directory", DEFAULT_OUTPUT_DIRECTORY),
        format=ExportFormat(data.get("format", ExportFormat.CSV.value)),
        delimiter_policy=DelimiterPolicy(data.get("delimiter_policy", DelimiterPolicy.TAB.value)),
        sheet=data.get("sheet"),
        columns=list(data.get("columns") or []),
        suggestion=SuggestionConfig(model=suggestion_raw.get("model", DEFAULT_SUGGESTION_MODEL)),
    )
