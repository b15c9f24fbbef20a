"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_STORAGE_DIRECTORY = "~/.pomodoro"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Initial segment settings and timer behaviour from `[pomodoro]`."""
    focus_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    long_break_every: int = 4
    auto_start: bool = False
    dev_durations: bool = False
    tick_interval_seconds: float = 1.0


@dataclass(frozen=True)
class StorageSettings:
    """Location of the persisted session record from `[storage]`."""
    directory: str = DEFAULT_STORAGE_DIRECTORY


@dataclass(frozen=True)
class NotificationSettings:
    """Segment-end reminder settings from `[notifications]`."""
    enabled: bool = True


@dataclass(frozen=True)
class FeedbackSettings:
    """Sound cue and haptic settings from `[feedback]`."""
    sound_enabled: bool = True
    haptics_enabled: bool = True
    output_device: Optional[int] = None
    volume: float = 0.4


@dataclass(frozen=True)
class UIServerSettings:
    """Websocket bridge settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    pomodoro: TimerSettings
    storage: StorageSettings
    notifications: NotificationSettings
    feedback: FeedbackSettings
    ui_server: UIServerSettings
    source_file: str
