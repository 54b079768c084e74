"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass

from breaks.constants import DEFAULT_BREAK_DURATION_SECONDS, DEFAULT_INTERVAL_SECONDS

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class SchedulerSettings:
    """Break cadence settings from `[scheduler]`."""
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    break_duration_seconds: int = DEFAULT_BREAK_DURATION_SECONDS
    autostart: bool = True


@dataclass(frozen=True)
class WakeDetectionSettings:
    """Sleep/wake detector tuning from `[wake_detection]`."""
    enabled: bool = True
    poll_interval_seconds: float = 5.0
    gap_threshold_seconds: float = 30.0


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    scheduler: SchedulerSettings
    wake_detection: WakeDetectionSettings
    ui_server: UIServerSettings
    logging: LoggingSettings
    source_file: str
