from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load the YAML config (config/formulary.yml by default)
- Validate it against the bundled JSON schema (config_schema.json)
- Apply defaults for every optional key
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/formulary.yml")
DEFAULT_PAGE_SIZE = 5


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    source_files: list[str] = field(default_factory=list)
    source_directory: str | None = None
    null_sentinels: set[str] | None = None  # upper-cased
    page_size: int = DEFAULT_PAGE_SIZE
    logs_directory: str = "./logs"
    export_path: str | None = None


def default_config() -> AppConfig:
    """Configuration used when no config file is present."""
    return AppConfig()


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails validation (unknown keys, wrong types, ...).
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


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    sentinels = data.get("null_sentinels")
    return AppConfig(
        source_files=list(data.get("source_files", [])),
        source_directory=data.get("source_directory"),
        null_sentinels={s.strip().upper() for s in sentinels} if sentinels else None,
        page_size=data.get("page_size", DEFAULT_PAGE_SIZE),
        logs_directory=data.get("logs_directory", "./logs"),
        export_path=data.get("export_path"),
    )
