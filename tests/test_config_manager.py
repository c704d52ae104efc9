"""Tests for jira_mcp/config_manager.py."""

import json
import os
import time
from pathlib import Path

import pytest

from jira_mcp.config_manager import (
    ConfigManager,
    ConfigValidationError,
    config,
    get_config_defaults,
    get_jira_settings,
    resolve_config_file,
    validate_config,
)

VALID_CONFIG = {
    "jira": {"host": "paddock.atlassian.net", "email": "bot@example.com", "api_token": "tok"},
    "defaults": {"project_key": "WEB"},
    "server": {"transport": "http", "port": 9000},
}


def _write(path: Path, data: dict) -> None:
    path.write_text(json.dumps(data))
    config.use_file(path)


class TestResolveConfigFile:
    def test_env_var_wins(self, tmp_path):
        os.environ["JIRA_MCP_CONFIG"] = str(tmp_path / "custom.json")
        assert resolve_config_file() == tmp_path / "custom.json"

    def test_local_config_json(self, tmp_path, monkeypatch):
        os.environ.pop("JIRA_MCP_CONFIG", None)
        (tmp_path / "config.json").write_text("{}")
        monkeypatch.chdir(tmp_path)
        assert resolve_config_file() == tmp_path / "config.json"

    def test_falls_back_to_user_config(self, tmp_path, monkeypatch):
        os.environ.pop("JIRA_MCP_CONFIG", None)
        monkeypatch.chdir(tmp_path)
        assert resolve_config_file().parts[-3:] == (".config", "jira-mcp", "config.json")


class TestValidateConfig:
    def test_valid_config(self):
        assert validate_config(VALID_CONFIG) == []

    def test_missing_credentials(self):
        errors = validate_config({})
        assert "Missing required key: jira.host" in errors
        assert "Missing required key: jira.email" in errors
        assert "Missing required key: jira.api_token" in errors

    def test_env_vars_satisfy_required_keys(self, jira_env):
        assert validate_config({}) == []

    def test_section_must_be_dict(self):
        errors = validate_config({**VALID_CONFIG, "server": ["nope"]})
        assert any("Section 'server' must be a dict" in e for e in errors)

    def test_wrong_type(self):
        errors = validate_config({**VALID_CONFIG, "server": {"port": "8000"}})
        assert any("server.port" in e and "expected int" in e for e in errors)

    def test_bool_is_not_an_int(self):
        errors = validate_config({**VALID_CONFIG, "server": {"port": True}})
        assert any("server.port" in e for e in errors)

    def test_timeout_accepts_int_or_float(self):
        jira = {**VALID_CONFIG["jira"], "timeout": 10}
        assert validate_config({**VALID_CONFIG, "jira": jira}) == []
        jira["timeout"] = 2.5
        assert validate_config({**VALID_CONFIG, "jira": jira}) == []

    def test_null_timeout_rejected(self):
        errors = validate_config({**VALID_CONFIG, "jira": {**VALID_CONFIG["jira"], "timeout": None}})
        assert errors == ["Invalid type for jira.timeout: expected int or float, got NoneType"]

    def test_null_optional_without_default_allowed(self):
        assert validate_config({**VALID_CONFIG, "defaults": {"assignee": None}, "server": {"tools": None}}) == []

    def test_null_required_key_rejected(self):
        errors = validate_config({**VALID_CONFIG, "jira": {**VALID_CONFIG["jira"], "host": None}})
        assert any("jira.host" in e for e in errors)

    def test_invalid_transport(self):
        errors = validate_config({**VALID_CONFIG, "server": {"transport": "websocket"}})
        assert any("server.transport" in e for e in errors)


class TestDefaults:
    def test_schema_defaults(self):
        defaults = get_config_defaults()
        assert defaults["defaults"] == {"project_key": "CPG"}
        assert defaults["server"]["transport"] == "stdio"
        assert defaults["server"]["path"] == "/mcp"
        assert defaults["jira"] == {"timeout": 30.0}

    def test_get_with_default_uses_schema(self):
        assert config.get_with_default("server", "port") == 8000
        assert config.get_with_default("defaults", "assignee") is None

    def test_get_with_default_prefers_file(self, tmp_path):
        _write(tmp_path / "c.json", VALID_CONFIG)
        assert config.get_with_default("server", "port") == 9000
        assert config.get_with_default("defaults", "project_key") == "WEB"

    def test_unknown_key(self):
        assert config.get_with_default("nope", "nothing") is None


class TestConfigManager:
    def test_singleton(self):
        assert ConfigManager() is config

    def test_missing_file_is_empty(self, isolated_config):
        assert config.get("jira") is None
        assert config.validate()[0] == "Missing required key: jira.host"
        assert config.config_file == isolated_config

    def test_get_section_and_key(self, tmp_path):
        _write(tmp_path / "c.json", VALID_CONFIG)
        assert config.get("server") == {"transport": "http", "port": 9000}
        assert config.get("server", "port") == 9000
        assert config.get("server", "missing", "fallback") == "fallback"
        assert config.get("absent", default=1) == 1

    def test_invalid_json_gives_empty_config(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        config.use_file(path)
        assert config.get("server", default="empty") == "empty"

    def test_reloads_when_file_changes(self, tmp_path):
        path = tmp_path / "c.json"
        _write(path, {"server": {"port": 1}})
        assert config.get("server", "port") == 1

        path.write_text(json.dumps({"server": {"port": 2}}))
        future = time.time() + 10
        os.utime(path, (future, future))
        assert config.get("server", "port") == 2

    def test_validate_or_raise(self):
        with pytest.raises(ConfigValidationError) as exc:
            config.validate_or_raise()
        assert "jira.host" in str(exc.value)
        assert exc.value.errors

    def test_validate_or_raise_passes(self, tmp_path):
        _write(tmp_path / "c.json", VALID_CONFIG)
        config.validate_or_raise()


class TestGetJiraSettings:
    def test_from_config_file(self, tmp_path):
        _write(tmp_path / "c.json", VALID_CONFIG)
        settings = get_jira_settings()
        assert settings == {
            "host": "paddock.atlassian.net",
            "email": "bot@example.com",
            "api_token": "tok",
            "timeout": 30.0,
        }

    def test_env_overrides_config(self, tmp_path, jira_env):
        _write(tmp_path / "c.json", {"jira": {"host": "other.atlassian.net", "timeout": 5}})
        settings = get_jira_settings()
        assert settings["host"] == "paddock.atlassian.net"
        assert settings["api_token"] == "secret-token"
        assert settings["timeout"] == 5.0

    @pytest.mark.parametrize("timeout", [None, "abc", True, 0, -5])
    def test_unusable_timeout_falls_back_to_default(self, tmp_path, timeout):
        _write(tmp_path / "c.json", {"jira": {**VALID_CONFIG["jira"], "timeout": timeout}})
        assert get_jira_settings()["timeout"] == 30.0

    def test_unset_values_are_empty(self):
        settings = get_jira_settings()
        assert settings["host"] == ""
        assert settings["email"] == ""
        assert settings["api_token"] == ""
