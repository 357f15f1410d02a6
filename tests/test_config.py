"""Tests for openapi2moonwalk.config -- data dir, project file, env vars, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from openapi2moonwalk.config import (
    PROJECT_CONFIG_FILENAME,
    get_data_dir,
    load_env_config,
    load_project_config,
    resolve_config,
)
from openapi2moonwalk.exceptions import ConfigError
from openapi2moonwalk.models import ConflictPolicy, ConverterConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_project_config(directory: Path, data: Any) -> None:
    (directory / PROJECT_CONFIG_FILENAME).write_text(json.dumps(data), encoding="utf-8")


# ---------------------------------------------------------------------------
# Data directory
# ---------------------------------------------------------------------------


class TestDataDir:
    def test_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("openapi2moonwalk.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
        result = get_data_dir()
        assert result == tmp_path / "data" / "openapi2moonwalk"
        assert result.is_dir()

    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("openapi2moonwalk.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_data_dir() == tmp_path / ".local" / "share" / "openapi2moonwalk"

    def test_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("openapi2moonwalk.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_data_dir() == tmp_path / ".openapi2moonwalk"


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_missing_file_gives_empty(self, isolated_config: Path) -> None:
        assert load_project_config() == {}

    def test_loads_from_working_directory(self, isolated_config: Path) -> None:
        _write_project_config(isolated_config, {"indent": 4})
        assert load_project_config() == {"indent": 4}

    def test_explicit_directory(self, tmp_path: Path) -> None:
        _write_project_config(tmp_path, {"on_conflict": "warn"})
        assert load_project_config(tmp_path) == {"on_conflict": "warn"}

    def test_invalid_json_raises(self, isolated_config: Path) -> None:
        (isolated_config / PROJECT_CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_non_object_raises(self, isolated_config: Path) -> None:
        _write_project_config(isolated_config, [1, 2])
        with pytest.raises(ConfigError, match="must be a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class TestEnvConfig:
    def test_only_set_variables(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAPI2MOONWALK_INDENT", "4")
        monkeypatch.setenv("OPENAPI2MOONWALK_COLLECT_SECURITY", "true")
        assert load_env_config() == {"indent": "4", "collect_security": "true"}

    def test_empty_value_ignored(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAPI2MOONWALK_TARGET_VERSION", "")
        assert load_env_config() == {}


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config() == ConverterConfig()
        config = resolve_config()
        assert config.target_version == "4.0.0"
        assert config.indent == 2
        assert config.validate_input is True
        assert config.on_conflict is ConflictPolicy.ERROR
        assert config.collect_security is False

    def test_project_overrides_defaults(self, isolated_config: Path) -> None:
        _write_project_config(isolated_config, {"indent": 4, "on_conflict": "warn"})
        config = resolve_config()
        assert config.indent == 4
        assert config.on_conflict is ConflictPolicy.WARN

    def test_env_overrides_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_project_config(isolated_config, {"indent": 4})
        monkeypatch.setenv("OPENAPI2MOONWALK_INDENT", "8")
        assert resolve_config().indent == 8

    def test_cli_overrides_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAPI2MOONWALK_VALIDATE", "true")
        assert resolve_config(validate_input=False).validate_input is False

    def test_none_override_is_ignored(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAPI2MOONWALK_ON_CONFLICT", "warn")
        assert resolve_config(on_conflict=None).on_conflict is ConflictPolicy.WARN

    def test_invalid_value_raises(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAPI2MOONWALK_INDENT", "wide")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config()

    def test_negative_indent_rejected(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError):
            resolve_config(indent=-1)

    def test_unknown_project_key_rejected(self, isolated_config: Path) -> None:
        _write_project_config(isolated_config, {"colour": "blue"})
        with pytest.raises(ConfigError, match="colour"):
            resolve_config()
