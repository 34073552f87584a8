"""Settings loaded from a TOML config file."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from reqcomplete.errors import ConfigError

CONFIG_FILENAME = "reqcomplete.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class Settings:
    """Reserved names and defaults used when building candidates."""

    modules_dir: str = "node_modules"
    package_file: str = "package.json"
    main_file: str = "index.js"
    extension: str = ".js"
    default_quote: str = "'"
    log_level: str = "WARNING"

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def load_config(config_path: Path | None, project_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else project_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML: {exc}", path) from None


def _string(table: dict[str, Any], key: str, default: str, path: Path | None) -> str:
    value = table.get(key, default)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"'{key}' must be a non-empty string", path)
    return value


def settings_from_config(config: dict[str, Any], path: Path | None = None) -> Settings:
    """Build Settings from a parsed config, validating every value."""
    defaults = Settings()

    completion = config.get("completion", {})
    if not isinstance(completion, dict):
        raise ConfigError("[completion] must be a table", path)
    logging_cfg = config.get("logging", {})
    if not isinstance(logging_cfg, dict):
        raise ConfigError("[logging] must be a table", path)

    settings = Settings(
        modules_dir=_string(completion, "modules_dir", defaults.modules_dir, path),
        package_file=_string(completion, "package_file", defaults.package_file, path),
        main_file=_string(completion, "main_file", defaults.main_file, path),
        extension=_string(completion, "extension", defaults.extension, path),
        default_quote=_string(completion, "default_quote", defaults.default_quote, path),
        log_level=_string(logging_cfg, "level", defaults.log_level, path).upper(),
    )
    validate(settings, path)
    return settings


def validate(settings: Settings, path: Path | None = None) -> None:
    """Raise ConfigError if any setting is unusable."""
    if settings.default_quote not in ("'", '"'):
        raise ConfigError("'default_quote' must be ' or \"", path)
    if not settings.extension.startswith(".") or len(settings.extension) < 2:
        raise ConfigError("'extension' must start with '.'", path)
    if settings.log_level not in _LOG_LEVELS:
        raise ConfigError(f"unknown log level '{settings.log_level}'", path)


def load_settings(
    config_path: Path | None,
    project_dir: Path,
    log_level: str | None = None,
) -> Settings:
    """Resolve settings. Precedence: defaults < config file < explicit overrides."""
    path = config_path if config_path is not None else project_dir / CONFIG_FILENAME
    settings = settings_from_config(load_config(config_path, project_dir), path)
    if log_level is not None:
        settings = replace(settings, log_level=log_level.upper())
        validate(settings)
    return settings
