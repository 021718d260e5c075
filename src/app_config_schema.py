"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Session cadence from `[timer]`, in minutes as shown to users."""
    focus_minutes: int = 20
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    sessions_until_long_break: int = 4
    auto_start: bool = False


@dataclass(frozen=True)
class WatchdogSettings:
    """Inactivity auto-pause settings from `[watchdog]`."""
    enabled: bool = True
    inactivity_threshold_seconds: float = 60.0


@dataclass(frozen=True)
class ActivitySettings:
    """Global keyboard/pointer listener settings from `[activity]`."""
    enabled: bool = True
    min_report_interval_seconds: float = 1.0


@dataclass(frozen=True)
class UIServerSettings:
    """Websocket UI bridge settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass(frozen=True)
class LoggingSettings:
    """Root logger settings from `[logging]`."""
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings = field(default_factory=TimerSettings)
    watchdog: WatchdogSettings = field(default_factory=WatchdogSettings)
    activity: ActivitySettings = field(default_factory=ActivitySettings)
    ui_server: UIServerSettings = field(default_factory=UIServerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source_file: str = ""
