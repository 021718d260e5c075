"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from typing import Any, Mapping

from app_config_schema import (
    ActivitySettings,
    AppConfig,
    AppConfigurationError,
    LoggingSettings,
    TimerSettings,
    UIServerSettings,
    WatchdogSettings,
)

_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_app_config(raw: Mapping[str, Any], *, source_file: str) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        timer=_parse_timer_settings(_section(raw, "timer")),
        watchdog=_parse_watchdog_settings(_section(raw, "watchdog")),
        activity=_parse_activity_settings(_section(raw, "activity")),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server")),
        logging=_parse_logging_settings(_section(raw, "logging")),
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    return TimerSettings(
        focus_minutes=_as_positive_int(
            section.get("focus_minutes", 20),
            "timer.focus_minutes",
        ),
        short_break_minutes=_as_positive_int(
            section.get("short_break_minutes", 5),
            "timer.short_break_minutes",
        ),
        long_break_minutes=_as_positive_int(
            section.get("long_break_minutes", 15),
            "timer.long_break_minutes",
        ),
        sessions_until_long_break=_as_positive_int(
            section.get("sessions_until_long_break", 4),
            "timer.sessions_until_long_break",
        ),
        auto_start=_as_bool(section.get("auto_start", False), "timer.auto_start"),
    )


def _parse_watchdog_settings(section: Mapping[str, Any]) -> WatchdogSettings:
    threshold = _as_float(
        section.get("inactivity_threshold_seconds", 60.0),
        "watchdog.inactivity_threshold_seconds",
    )
    if threshold <= 0:
        raise AppConfigurationError(
            "watchdog.inactivity_threshold_seconds must be greater than zero."
        )
    return WatchdogSettings(
        enabled=_as_bool(section.get("enabled", True), "watchdog.enabled"),
        inactivity_threshold_seconds=threshold,
    )


def _parse_activity_settings(section: Mapping[str, Any]) -> ActivitySettings:
    interval = _as_float(
        section.get("min_report_interval_seconds", 1.0),
        "activity.min_report_interval_seconds",
    )
    if interval < 0:
        raise AppConfigurationError(
            "activity.min_report_interval_seconds must not be negative."
        )
    return ActivitySettings(
        enabled=_as_bool(section.get("enabled", True), "activity.enabled"),
        min_report_interval_seconds=interval,
    )


def _parse_ui_server_settings(section: Mapping[str, Any]) -> UIServerSettings:
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
    )


def _parse_logging_settings(section: Mapping[str, Any]) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper()
    if level not in _ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LOG_LEVELS))
        raise AppConfigurationError(f"logging.level must be one of: {allowed}.")
    return LoggingSettings(level=level)


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_positive_int(value: Any, field: str) -> int:
    number = _as_int(value, field)
    if number < 1:
        raise AppConfigurationError(f"{field} must be at least 1.")
    return number


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")
