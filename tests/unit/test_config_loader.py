from __future__ import annotations

from pathlib import Path

import pytest

from tackle_import.config.loader import ConfigError, load_config
from tackle_import.models.config_models import AppConfig


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.database.host == "localhost"
    assert cfg.database.port == 5432
    assert cfg.identity.owner_id == "owner-from-config"
    assert cfg.request_timeout_seconds == 8.0
    assert cfg.error_display_limit == 20
    assert cfg.preview_limit == 50
    assert cfg.success_message_seconds == 1.8


def test_load_config_default_path(write_config: Path):
    cfg = load_config()
    assert cfg.database.database == "tackle"


def test_load_config_missing_file_required(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "not_exists.yml")


def test_load_config_missing_file_optional(temp_workdir: Path):
    assert load_config(required=False) == AppConfig()


def test_load_config_empty_file_uses_defaults(temp_workdir: Path):
    p = temp_workdir / "config" / "tackle.yml"
    p.write_text("", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.request_timeout_seconds == 8.0
    assert cfg.identity.owner_id is None


def test_load_config_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "config" / "tackle.yml"
    p.write_text("database: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


def test_load_config_top_level_not_mapping(temp_workdir: Path):
    p = temp_workdir / "config" / "tackle.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(p)
