from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_ERROR_DISPLAY_LIMIT,
    DEFAULT_PREVIEW_LIMIT,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_SUCCESS_MESSAGE_SECONDS,
    AppConfig,
    DatabaseConfig,
    IdentityConfig,
)

"""Config loader.

Responsibilities:
- Load YAML config (default config/tackle.yml)
- Validate against the packaged config_schema.json
- Apply defaults for every optional key
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/tackle.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the config data
            fails validation (unknown keys, wrong types).
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


def load_config(path: Path | None = None, *, required: bool = True) -> AppConfig:
    """Load and validate the config file.

    A missing file is an error when ``required``; otherwise all defaults apply.
    """
    path = path or DEFAULT_CONFIG_PATH
    if not path.exists():
        if required:
            raise ConfigError(f"config file not found: {path}")
        return AppConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    id_raw = data.get("identity") or {}
    return AppConfig(
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
        identity=IdentityConfig(
            owner_id=id_raw.get("owner_id"),
            email=id_raw.get("email"),
        ),
        request_timeout_seconds=float(
            data.get("request_timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS)
        ),
        error_display_limit=int(data.get("error_display_limit", DEFAULT_ERROR_DISPLAY_LIMIT)),
        preview_limit=int(data.get("preview_limit", DEFAULT_PREVIEW_LIMIT)),
        success_message_seconds=float(
            data.get("success_message_seconds", DEFAULT_SUCCESS_MESSAGE_SECONDS)
        ),
    )
