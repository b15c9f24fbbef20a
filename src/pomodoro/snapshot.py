"""Persisted session record and its JSON-compatible (camelCase) schema."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .constants import MAX_STORED_SECONDS, MAX_STORED_TIMESTAMP_MS, MODES, SEGMENTS
from .settings import (
    PomodoroSettings,
    SegmentDurations,
    sanitize_settings,
    segment_durations,
    settings_from_durations,
)


@dataclass(frozen=True)
class StoredSession:
    """Session fields written to the key-value store after every change."""
    mode: str
    is_running: bool
    current_segment: str
    pomodoros_completed: int
    end_timestamp_ms: Optional[int]
    remaining_seconds: int
    settings: PomodoroSettings
    durations: SegmentDurations
    updated_at_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "isRunning": self.is_running,
            "currentSegment": self.current_segment,
            "pomodorosCompleted": self.pomodoros_completed,
            "endTimestampMs": self.end_timestamp_ms,
            "remainingSeconds": self.remaining_seconds,
            "settings": self.settings.to_dict(),
            "durations": self.durations.to_dict(),
            "updatedAt": self.updated_at_ms,
        }


def parse_stored_session(raw: Any) -> Optional[StoredSession]:
    """Parse a decoded JSON record; anything malformed yields `None`."""
    if not isinstance(raw, Mapping):
        return None

    mode = raw.get("mode")
    segment = raw.get("currentSegment")
    is_running = raw.get("isRunning")
    if mode not in MODES or segment not in SEGMENTS:
        return None
    if not isinstance(is_running, bool):
        return None

    completed = _as_int(raw.get("pomodorosCompleted"), MAX_STORED_TIMESTAMP_MS)
    remaining = _as_int(raw.get("remainingSeconds"), MAX_STORED_SECONDS)
    if completed is None or remaining is None:
        return None

    raw_settings = raw.get("settings")
    raw_durations = raw.get("durations")
    if isinstance(raw_settings, Mapping):
        settings = sanitize_settings(raw_settings)
    elif isinstance(raw_durations, Mapping):
        settings = settings_from_durations(raw_durations)
    else:
        settings = PomodoroSettings()

    durations = segment_durations(settings)
    if isinstance(raw_durations, Mapping):
        durations = _parse_durations(raw_durations, durations)

    return StoredSession(
        mode=mode,
        is_running=is_running,
        current_segment=segment,
        pomodoros_completed=max(0, completed),
        # An unusable timestamp is kept as missing; recovery restores such a
        # record as stopped instead of discarding it.
        end_timestamp_ms=_as_int(raw.get("endTimestampMs"), MAX_STORED_TIMESTAMP_MS),
        remaining_seconds=max(0, remaining),
        settings=settings,
        durations=durations,
        updated_at_ms=_as_int(raw.get("updatedAt"), MAX_STORED_TIMESTAMP_MS) or 0,
    )


def _parse_durations(raw: Mapping[str, Any], fallback: SegmentDurations) -> SegmentDurations:
    values = fallback.to_dict()
    for segment in SEGMENTS:
        seconds = _as_int(raw.get(segment), MAX_STORED_SECONDS)
        if seconds is not None and seconds > 0:
            values[segment] = seconds
    return SegmentDurations(
        focus=values[SEGMENTS[0]],
        short_break=values[SEGMENTS[1]],
        long_break=values[SEGMENTS[2]],
    )


def _as_int(value: Any, limit: int) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and math.isfinite(value):
        value = int(value)
    if not isinstance(value, int) or abs(value) > limit:
        return None
    return value
