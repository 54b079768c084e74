"""Config file discovery and TOML loading for the break scheduler."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older runtimes
    import tomli as tomllib  # type: ignore

from app_config_parser import parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    LoggingSettings,
    SchedulerSettings,
    UIServerSettings,
    WakeDetectionSettings,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "AppConfig",
    "AppConfigurationError",
    "LoggingSettings",
    "SchedulerSettings",
    "UIServerSettings",
    "WakeDetectionSettings",
    "default_app_config",
    "load_app_config",
    "resolve_config_path",
]


def resolve_config_path(config_path: str | None = None) -> Path:
    env_path = os.getenv("APP_CONFIG_FILE")
    raw = config_path or env_path or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    if path.exists():
        return path

    # Packaged fallback: look beside the frozen executable when no explicit path is provided.
    if config_path is None and env_path is None and getattr(sys, "frozen", False):
        executable_path = Path(sys.executable).resolve().parent / DEFAULT_CONFIG_FILE
        if executable_path.exists():
            return executable_path

    return path


def default_app_config(source_file: str = "") -> AppConfig:
    """Configuration used when no config file exists: every section at its defaults."""
    return AppConfig(
        scheduler=SchedulerSettings(),
        wake_detection=WakeDetectionSettings(),
        ui_server=UIServerSettings(),
        logging=LoggingSettings(),
        source_file=source_file,
    )


def load_app_config(config_path: str | None = None, *, required: bool = True) -> AppConfig:
    path = resolve_config_path(config_path)
    if not path.exists():
        if required:
            raise AppConfigurationError(f"Config file not found: {path}")
        return default_app_config()
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except Exception as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    if not isinstance(raw, Mapping):
        raise AppConfigurationError("Root config TOML object must be a table.")

    return parse_app_config(raw, base_dir=path.parent, source_file=str(path))
