from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from .env_auth import EnvAuthConfig, create_env_auth_manager

DEFAULT_API_URL = "https://api.linear.app/graphql"
DEFAULT_TIMEOUT = 30.0
DEFAULT_LIMIT = 50
CONFIG_PATH_VAR = "LINEAR_CLI_CONFIG"


class ConfigError(RuntimeError):
    pass


@dataclass
class CliConfig:
    api_key: str
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    default_limit: int = DEFAULT_LIMIT


@dataclass
class FileSettings:
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    default_limit: int = DEFAULT_LIMIT
    logging_json_enabled: bool = False
    logging_level: str = "WARNING"


def _settings_path() -> Path | None:
    explicit = os.getenv(CONFIG_PATH_VAR)
    if explicit:
        p = Path(explicit).expanduser()
        if not p.exists():
            raise ConfigError(f"Configuration file not found: {p}")
        return p
    default = Path.home() / ".config" / "linear-cli" / "config.yaml"
    return default if default.is_file() else None


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def load_settings(path: str | Path | None = None) -> FileSettings:
    """Read optional YAML settings and apply environment overrides."""
    p = Path(path) if path is not None else _settings_path()
    raw: dict[str, Any] = {}
    if p is not None:
        try:
            text = p.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Could not read configuration file {p}: {exc}") from exc
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid configuration file {p}: {exc}") from exc
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"Configuration root must be a mapping: {p}")
        raw = cast(dict[str, Any], loaded or {})
    logging_config = raw.get("logging") or {}
    if not isinstance(logging_config, dict):
        raise ConfigError(f"Configuration key 'logging' must be a mapping: {p}")

    try:
        settings = FileSettings(
            api_url=str(raw.get("api_url", DEFAULT_API_URL)),
            timeout=float(raw.get("timeout", DEFAULT_TIMEOUT)),
            default_limit=int(raw.get("default_limit", DEFAULT_LIMIT)),
            logging_json_enabled=bool(logging_config.get("json_enabled", False)),
            logging_level=str(logging_config.get("level", "WARNING")),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration value in {p}: {exc}") from exc

    level = os.getenv("LINEAR_CLI_LOG_LEVEL")
    if level:
        settings.logging_level = level
    if _env_flag("LINEAR_CLI_DEBUG"):
        settings.logging_level = "DEBUG"
    if _env_flag("LINEAR_CLI_LOG_JSON"):
        settings.logging_json_enabled = True
    return settings


def load_config(
    settings: FileSettings | None = None, auth: EnvAuthConfig | None = None
) -> CliConfig:
    """Build the per-invocation configuration; raises if no API key is available."""
    settings = settings or load_settings()
    api_key = create_env_auth_manager(auth).require_api_key()
    return CliConfig(
        api_key=api_key,
        api_url=settings.api_url,
        timeout=settings.timeout,
        default_limit=settings.default_limit,
    )
