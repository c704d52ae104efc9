"""Centralized Configuration Manager.

Provides thread-safe access to the server's config.json with:
- Automatic cache invalidation via mtime checking
- Schema validation and schema defaults
- Environment overrides for Jira credentials

Config file resolution (first match wins):
  1. ``$JIRA_MCP_CONFIG``
  2. ``./config.json``
  3. ``~/.config/jira-mcp/config.json``

Usage:
    from jira_mcp.config_manager import config, get_jira_settings

    port = config.get_with_default("server", "port")
    settings = get_jira_settings()  # env vars win over config.json
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "JIRA_MCP_CONFIG"
USER_CONFIG_FILE = Path.home() / ".config" / "jira-mcp" / "config.json"

# Environment variables that override the "jira" section
JIRA_ENV_OVERRIDES = {
    "host": "JIRA_HOST",
    "email": "JIRA_EMAIL",
    "api_token": "JIRA_API_TOKEN",
}


def resolve_config_file() -> Path:
    """Find the config file to use."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(os.path.expanduser(env_path))

    local = Path.cwd() / "config.json"
    if local.exists():
        return local

    return USER_CONFIG_FILE


# ==================== Config Validation ====================


class ConfigValidationError(Exception):
    """Raised when config validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Config validation failed: {'; '.join(errors)}")


# Format: {section: {key: (type, required, default)}}
CONFIG_SCHEMA: dict[str, dict[str, Any]] = {
    "jira": {
        "host": (str, True, None),
        "email": (str, True, None),
        "api_token": (str, True, None),
        "timeout": ((int, float), False, 30.0),
    },
    "defaults": {
        "project_key": (str, False, "CPG"),
        "assignee": (str, False, None),
    },
    "server": {
        "name": (str, False, "jira-mcp"),
        "transport": (str, False, "stdio"),
        "host": (str, False, "127.0.0.1"),
        "port": (int, False, 8000),
        "path": (str, False, "/mcp"),
        "tools": (list, False, None),
    },
}

VALID_TRANSPORTS = ("stdio", "http")


def _type_name(expected_type: Any) -> str:
    if isinstance(expected_type, tuple):
        return " or ".join(t.__name__ for t in expected_type)
    return expected_type.__name__


def validate_config(config: dict[str, Any]) -> list[str]:
    """Validate config against schema.

    Required keys in the ``jira`` section may be supplied through the
    environment instead, so they only count as missing when neither is set.

    Args:
        config: Config dict to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors: list[str] = []

    for section, schema in CONFIG_SCHEMA.items():
        section_data = config.get(section, {})
        if not isinstance(section_data, dict):
            errors.append(f"Section '{section}' must be a dict, got {type(section_data).__name__}")
            continue

        for key, (expected_type, required, default) in schema.items():
            if key not in section_data:
                env_var = JIRA_ENV_OVERRIDES.get(key) if section == "jira" else None
                if required and not (env_var and os.environ.get(env_var)):
                    errors.append(f"Missing required key: {section}.{key}")
                continue

            value = section_data[key]
            if value is None and default is None and not required:
                continue
            # bool is an int subclass; never accept it for numeric settings
            if isinstance(value, bool) or not isinstance(value, expected_type):
                errors.append(
                    f"Invalid type for {section}.{key}: expected {_type_name(expected_type)}, "
                    f"got {type(value).__name__}"
                )

    server = config.get("server")
    transport = server.get("transport") if isinstance(server, dict) else None
    if transport is not None and transport not in VALID_TRANSPORTS:
        errors.append(f"Invalid server.transport '{transport}': expected one of {', '.join(VALID_TRANSPORTS)}")

    return errors


def get_config_defaults() -> dict[str, Any]:
    """Get default config values from schema."""
    defaults: dict[str, Any] = {}

    for section, schema in CONFIG_SCHEMA.items():
        section_defaults = {key: spec[2] for key, spec in schema.items() if spec[2] is not None}
        if section_defaults:
            defaults[section] = section_defaults

    return defaults


class ConfigManager:
    """Thread-safe, auto-reloading configuration manager.

    Singleton pattern ensures one manager per process. The file is re-read
    whenever its mtime moves forward.
    """

    _instance: "ConfigManager | None" = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "ConfigManager":
        """Singleton pattern - one instance per process."""
        with cls._instance_lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._initialized = False
                cls._instance = instance
            return cls._instance

    def __init__(self):
        if getattr(self, "_initialized", False):
            return

        self._lock = threading.RLock()
        self._cache: dict[str, Any] = {}
        self._last_mtime: float = 0.0
        self._config_file = resolve_config_file()
        self._initialized = True

        self._load()

    def _load(self) -> None:
        """Load config from disk (internal, no lock)."""
        try:
            if self._config_file.exists():
                with open(self._config_file) as f:
                    self._cache = json.load(f)
                self._last_mtime = self._config_file.stat().st_mtime
                logger.debug(f"Config loaded from {self._config_file}, {len(self._cache)} sections")
            else:
                self._cache = {}
                self._last_mtime = 0.0
                logger.debug(f"Config file not found: {self._config_file}")
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {self._config_file}: {e}")
            self._cache = {}
        except OSError as e:
            logger.error(f"Failed to read {self._config_file}: {e}")
            self._cache = {}

    def _check_reload(self) -> None:
        """Reload if the file was modified externally (internal, no lock)."""
        try:
            if self._config_file.exists():
                current_mtime = self._config_file.stat().st_mtime
                if current_mtime > self._last_mtime:
                    logger.info("Config file changed, reloading")
                    self._load()
        except OSError:
            logger.debug(f"Could not stat {self._config_file}")

    # ==================== Public API ====================

    def get(self, section: str, key: str | None = None, default: Any = None) -> Any:
        """Get a config value.

        Args:
            section: Top-level section name (e.g., "jira", "server")
            key: Optional key within section. If None, returns entire section.
            default: Default value if not found

        Returns:
            Config value or default
        """
        with self._lock:
            self._check_reload()

            section_data = self._cache.get(section)
            if section_data is None:
                return default

            if key is None:
                return section_data

            if isinstance(section_data, dict):
                return section_data.get(key, default)

            return default

    def get_with_default(self, section: str, key: str) -> Any:
        """Get a config value, falling back to the schema default."""
        with self._lock:
            self._check_reload()

            section_data = self._cache.get(section, {})
            if isinstance(section_data, dict) and key in section_data:
                return section_data[key]

            return get_config_defaults().get(section, {}).get(key)

    def use_file(self, path: Path) -> None:
        """Point the manager at a different config file and load it."""
        with self._lock:
            self._config_file = Path(path).expanduser()
            self._load()

    @property
    def config_file(self) -> Path:
        return self._config_file

    def validate(self) -> list[str]:
        """Validate the current config against the schema."""
        with self._lock:
            self._check_reload()
            return validate_config(self._cache)

    def validate_or_raise(self) -> None:
        """Validate config and raise if invalid.

        Raises:
            ConfigValidationError: If validation fails
        """
        errors = self.validate()
        if errors:
            raise ConfigValidationError(errors)


# Global singleton instance for convenient access
config = ConfigManager()


def _timeout_setting() -> float:
    """Configured request timeout, or the schema default when unusable."""
    default = CONFIG_SCHEMA["jira"]["timeout"][2]
    value = config.get_with_default("jira", "timeout")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        logger.warning(f"Ignoring invalid jira.timeout {value!r}, using {default}s")
        return default
    return float(value)


def get_jira_settings() -> dict[str, Any]:
    """Return Jira connection settings, environment first.

    Returns:
        Dict with ``host``, ``email``, ``api_token`` (empty string when unset)
        and ``timeout``.
    """
    settings: dict[str, Any] = {}
    for key, env_var in JIRA_ENV_OVERRIDES.items():
        settings[key] = os.environ.get(env_var) or config.get("jira", key, "") or ""
    settings["timeout"] = _timeout_setting()
    return settings
