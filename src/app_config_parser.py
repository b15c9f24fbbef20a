"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    DEFAULT_STORAGE_DIRECTORY,
    AppConfig,
    AppConfigurationError,
    FeedbackSettings,
    NotificationSettings,
    StorageSettings,
    TimerSettings,
    UIServerSettings,
)
from pomodoro.settings import sanitize_settings


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    pomodoro = _parse_timer_settings(_section(raw, "pomodoro"))
    storage = _parse_storage_settings(_section(raw, "storage"), base_dir=base_dir)
    notifications = _parse_notification_settings(_section(raw, "notifications"))
    feedback = _parse_feedback_settings(_section(raw, "feedback"))
    ui_server = _parse_ui_server_settings(_section(raw, "ui_server"))

    return AppConfig(
        pomodoro=pomodoro,
        storage=storage,
        notifications=notifications,
        feedback=feedback,
        ui_server=ui_server,
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    defaults = TimerSettings()
    # Segment values are clamped like runtime edits; only their type is enforced.
    segments = sanitize_settings(
        {
            "focus_minutes": _as_float(
                section.get("focus_minutes", defaults.focus_minutes),
                "pomodoro.focus_minutes",
            ),
            "short_break_minutes": _as_float(
                section.get("short_break_minutes", defaults.short_break_minutes),
                "pomodoro.short_break_minutes",
            ),
            "long_break_minutes": _as_float(
                section.get("long_break_minutes", defaults.long_break_minutes),
                "pomodoro.long_break_minutes",
            ),
            "long_break_every": _as_float(
                section.get("long_break_every", defaults.long_break_every),
                "pomodoro.long_break_every",
            ),
        }
    )
    tick_interval_seconds = _as_float(
        section.get("tick_interval_seconds", defaults.tick_interval_seconds),
        "pomodoro.tick_interval_seconds",
    )
    if tick_interval_seconds <= 0:
        raise AppConfigurationError("pomodoro.tick_interval_seconds must be greater than zero.")

    return TimerSettings(
        focus_minutes=segments.focus_minutes,
        short_break_minutes=segments.short_break_minutes,
        long_break_minutes=segments.long_break_minutes,
        long_break_every=segments.long_break_every,
        auto_start=_as_bool(section.get("auto_start", False), "pomodoro.auto_start"),
        dev_durations=_as_bool(
            section.get("dev_durations", False),
            "pomodoro.dev_durations",
        ),
        tick_interval_seconds=tick_interval_seconds,
    )


def _parse_storage_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StorageSettings:
    directory = _as_str(
        section.get("directory", DEFAULT_STORAGE_DIRECTORY),
        "storage.directory",
    )
    return StorageSettings(
        directory=_resolve_path(base_dir, directory or DEFAULT_STORAGE_DIRECTORY),
    )


def _parse_notification_settings(section: Mapping[str, Any]) -> NotificationSettings:
    return NotificationSettings(
        enabled=_as_bool(section.get("enabled", True), "notifications.enabled"),
    )


def _parse_feedback_settings(section: Mapping[str, Any]) -> FeedbackSettings:
    volume = _as_float(section.get("volume", 0.4), "feedback.volume")
    if not 0.0 <= volume <= 1.0:
        raise AppConfigurationError(f"feedback.volume must be in [0, 1], got: {volume}")
    return FeedbackSettings(
        sound_enabled=_as_bool(
            section.get("sound_enabled", True),
            "feedback.sound_enabled",
        ),
        haptics_enabled=_as_bool(
            section.get("haptics_enabled", True),
            "feedback.haptics_enabled",
        ),
        output_device=(
            _as_int(section.get("output_device"), "feedback.output_device")
            if "output_device" in section
            else None
        ),
        volume=volume,
    )


def _parse_ui_server_settings(section: Mapping[str, Any]) -> UIServerSettings:
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
    )


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
            return int(value.strip(), 10)
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a number.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a number.") from error
    raise AppConfigurationError(f"{field} must be a number.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
