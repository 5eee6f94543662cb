from __future__ import annotations

import json
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import pandas as pd
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import MergeConfig

"""Config loader.

Responsibilities:
- Load YAML config (config/merge.yml by default) or a key/value settings
  workbook, the format the business team maintains by hand
- Validate against config_schema.json shipped next to this module
- Apply defaults (TIMEZONE=UTC etc.) and environment overrides
- Return one immutable MergeConfig
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "config_from_mapping",
    "load_config",
    "load_settings_workbook",
    "settings_from_pairs",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

COLUMN_NAME_PREFIX = "COLUMN_NAME_"
COLUMN_WIDTH_PREFIX = "COLUMN_WIDTH_"

ENV_ROOT_DIR = "PARTSLIST_ROOT_DIR"
ENV_OUTPUT_DIR = "PARTSLIST_OUTPUT_DIR"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the data
            fails validation (missing required keys, wrong types, unknown keys).
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


def _check_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {name}") from e
    return name


def config_from_mapping(data: dict[str, Any]) -> MergeConfig:
    """Validate a raw settings mapping and build a MergeConfig."""
    _validate_config_schema(data)

    # 環境変数 (.env 含む) がファイル設定より優先
    root = os.getenv(ENV_ROOT_DIR) or data.get("ROOT_FOLDER_ID")
    output = os.getenv(ENV_OUTPUT_DIR) or data.get("OUTPUT_FOLDER_ID")

    defaults = MergeConfig(target_sheet_name="", column_names={})
    return MergeConfig(
        target_sheet_name=data["TARGET_SHEET_NAME"],
        column_names={str(k): str(v) for k, v in data["COLUMN_NAMES"].items()},
        column_widths={str(k): int(v) for k, v in (data.get("COLUMN_WIDTHS") or {}).items()},
        row_height=data.get("ROW_HEIGHT"),
        template_spreadsheet_id=data.get("TEMPLATE_SPREADSHEET_ID"),
        output_folder_id=output,
        root_folder_id=root,
        timezone=_check_timezone(data.get("TIMEZONE", defaults.timezone)),
        group_name_marker=data.get("GROUP_NAME_MARKER", defaults.group_name_marker),
        reserved_prefix=data.get("RESERVED_PREFIX", defaults.reserved_prefix),
        exclude_stock_status=data.get("EXCLUDE_STOCK_STATUS", defaults.exclude_stock_status),
    )


def settings_from_pairs(pairs: Iterable[tuple[Any, Any]]) -> dict[str, Any]:
    """Turn (key, value) settings rows into a raw settings mapping.

    COLUMN_NAME_<X> / COLUMN_WIDTH_<X> rows fill the column tables; any other
    value is JSON-decoded when possible and kept verbatim otherwise. Rows with
    an empty key are ignored.
    """
    settings: dict[str, Any] = {}
    column_names: dict[str, str] = {}
    column_widths: dict[str, int] = {}

    for key, value in pairs:
        if not isinstance(key, str) or not key.strip():
            continue
        key = key.strip()
        if key.startswith(COLUMN_NAME_PREFIX):
            column_names[key[len(COLUMN_NAME_PREFIX):]] = "" if value is None else str(value)
        elif key.startswith(COLUMN_WIDTH_PREFIX):
            try:
                column_widths[key[len(COLUMN_WIDTH_PREFIX):]] = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"invalid column width for {key}: {value!r}") from e
        elif isinstance(value, str):
            try:
                settings[key] = json.loads(value)
            except json.JSONDecodeError:
                settings[key] = value
        else:
            settings[key] = value

    settings["COLUMN_NAMES"] = column_names
    if column_widths:
        settings["COLUMN_WIDTHS"] = column_widths
    return settings


def load_settings_workbook(path: Path, sheet_name: str | int = 0) -> MergeConfig:
    """Load a key/value settings workbook (column A = key, column B = value)."""
    try:
        df = pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=object)
    except (OSError, ValueError) as e:
        raise ConfigError(f"cannot read settings workbook {path}: {e}") from e

    pairs = []
    for raw in df.itertuples(index=False):
        if len(raw) < 2:
            continue
        key, value = raw[0], raw[1]
        pairs.append((key, None if pd.isna(value) else value))
    return config_from_mapping(settings_from_pairs(pairs))


def load_config(path: Path) -> MergeConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    if path.suffix.lower() in (".xlsx", ".xlsm", ".xls"):
        return load_settings_workbook(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return config_from_mapping(data)
