"""Timer settings validation and the segment durations derived from them."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional, Union

from .constants import (
    DEFAULT_FOCUS_MINUTES,
    DEFAULT_LONG_BREAK_EVERY,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_SHORT_BREAK_MINUTES,
    DEV_SEGMENT_SECONDS,
    FOCUS_MINUTES_RANGE,
    LONG_BREAK_MINUTES_RANGE,
    MIN_LONG_BREAK_EVERY,
    SEGMENT_FOCUS,
    SEGMENT_LONG_BREAK,
    SEGMENT_SHORT_BREAK,
    SHORT_BREAK_MINUTES_RANGE,
)

# Accepted spellings per field: Python keyword names first, then the
# camelCase keys used by the persisted snapshot.
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "focus_minutes": ("focus_minutes", "focusMin", "focusMinutes"),
    "short_break_minutes": ("short_break_minutes", "shortBreakMin", "shortBreakMinutes"),
    "long_break_minutes": ("long_break_minutes", "longBreakMin", "longBreakMinutes"),
    "long_break_every": ("long_break_every", "longBreakEvery"),
}

SETTINGS_FIELDS: frozenset[str] = frozenset(
    key for keys in _FIELD_KEYS.values() for key in keys
)


@dataclass(frozen=True)
class PomodoroSettings:
    """User-editable segment lengths (minutes) and the long-break cadence."""
    focus_minutes: int = DEFAULT_FOCUS_MINUTES
    short_break_minutes: int = DEFAULT_SHORT_BREAK_MINUTES
    long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES
    long_break_every: int = DEFAULT_LONG_BREAK_EVERY

    def to_dict(self) -> dict[str, int]:
        return {
            "focusMin": self.focus_minutes,
            "shortBreakMin": self.short_break_minutes,
            "longBreakMin": self.long_break_minutes,
            "longBreakEvery": self.long_break_every,
        }


@dataclass(frozen=True)
class SegmentDurations:
    """Segment lengths in seconds."""
    focus: int
    short_break: int
    long_break: int

    def for_segment(self, segment: str) -> int:
        if segment == SEGMENT_SHORT_BREAK:
            return self.short_break
        if segment == SEGMENT_LONG_BREAK:
            return self.long_break
        return self.focus

    def to_dict(self) -> dict[str, int]:
        return {
            SEGMENT_FOCUS: self.focus,
            SEGMENT_SHORT_BREAK: self.short_break,
            SEGMENT_LONG_BREAK: self.long_break,
        }


SettingsInput = Union[Mapping[str, Any], PomodoroSettings, None]


def sanitize_settings(
    partial: SettingsInput = None,
    previous: Optional[PomodoroSettings] = None,
) -> PomodoroSettings:
    """Round and clamp every field; missing or unusable fields keep `previous`.

    Never raises. The result always satisfies the documented ranges, so
    sanitizing an already sanitized value returns it unchanged.
    """
    base = previous or PomodoroSettings()
    if isinstance(partial, PomodoroSettings):
        values: Mapping[str, Any] = asdict(partial)
    else:
        values = partial or {}

    return PomodoroSettings(
        focus_minutes=_clamp(
            _pick(values, "focus_minutes"),
            base.focus_minutes,
            *FOCUS_MINUTES_RANGE,
        ),
        short_break_minutes=_clamp(
            _pick(values, "short_break_minutes"),
            base.short_break_minutes,
            *SHORT_BREAK_MINUTES_RANGE,
        ),
        long_break_minutes=_clamp(
            _pick(values, "long_break_minutes"),
            base.long_break_minutes,
            *LONG_BREAK_MINUTES_RANGE,
        ),
        long_break_every=_clamp(
            _pick(values, "long_break_every"),
            base.long_break_every,
            MIN_LONG_BREAK_EVERY,
            None,
        ),
    )


def segment_durations(
    settings: PomodoroSettings,
    *,
    dev_durations: bool = False,
) -> SegmentDurations:
    """Return per-segment seconds for `settings` (fixed short values in dev mode)."""
    if dev_durations:
        return SegmentDurations(
            focus=DEV_SEGMENT_SECONDS[SEGMENT_FOCUS],
            short_break=DEV_SEGMENT_SECONDS[SEGMENT_SHORT_BREAK],
            long_break=DEV_SEGMENT_SECONDS[SEGMENT_LONG_BREAK],
        )
    return SegmentDurations(
        focus=settings.focus_minutes * 60,
        short_break=settings.short_break_minutes * 60,
        long_break=settings.long_break_minutes * 60,
    )


def settings_from_durations(
    durations: Mapping[str, Any],
    previous: Optional[PomodoroSettings] = None,
) -> PomodoroSettings:
    """Derive minute settings from a seconds mapping (older snapshots only stored these)."""
    partial: dict[str, Any] = {}
    for segment, field in (
        (SEGMENT_FOCUS, "focus_minutes"),
        (SEGMENT_SHORT_BREAK, "short_break_minutes"),
        (SEGMENT_LONG_BREAK, "long_break_minutes"),
    ):
        seconds = _rounded(durations.get(segment))
        if seconds is not None:
            partial[field] = (seconds + 30) // 60
    return sanitize_settings(partial, previous)


def _pick(values: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_KEYS[field]:
        if key in values:
            return values[key]
    return None


def _clamp(
    value: Any,
    fallback: int,
    minimum: int,
    maximum: Optional[int],
) -> int:
    rounded = _rounded(value)
    if rounded is None:
        rounded = _rounded(fallback)
    if rounded is None:
        rounded = minimum
    rounded = max(minimum, rounded)
    if maximum is not None:
        rounded = min(maximum, rounded)
    return rounded


def _rounded(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        # Half-up: 2.5 -> 3, -0.5 -> 0.
        return int(math.floor(value + 0.5))
    return None
