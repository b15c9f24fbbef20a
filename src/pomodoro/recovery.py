"""Segment transition policy and bounded catch-up for restored sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import (
    MAX_CATCH_UP_TRANSITIONS,
    MODE_PAUSED,
    SEGMENT_FOCUS,
    SEGMENT_LONG_BREAK,
    SEGMENT_SHORT_BREAK,
)
from .settings import PomodoroSettings, SegmentDurations
from .snapshot import StoredSession


@dataclass(frozen=True)
class RestoredSession:
    """Session fields resolved against the current wall clock."""
    segment: str
    mode: str
    is_running: bool
    remaining_seconds: int
    end_timestamp_ms: Optional[int]
    pomodoros_completed: int
    settings: PomodoroSettings
    transitions: int = 0


def next_segment(
    finished: str,
    pomodoros_completed: int,
    long_break_every: int,
) -> tuple[str, int]:
    """Return the segment following `finished` and the updated focus count."""
    if finished != SEGMENT_FOCUS:
        return SEGMENT_FOCUS, pomodoros_completed

    completed = pomodoros_completed + 1
    if completed % max(1, long_break_every) == 0:
        return SEGMENT_LONG_BREAK, completed
    return SEGMENT_SHORT_BREAK, completed


def remaining_until(end_timestamp_ms: int, now_ms: int) -> int:
    """Whole seconds left until `end_timestamp_ms`, rounded up; may be negative."""
    return -((now_ms - end_timestamp_ms) // 1000)


def resolve_stored_session(
    stored: StoredSession,
    *,
    now_ms: int,
    auto_start: bool,
    durations: SegmentDurations,
) -> RestoredSession:
    """Resolve a persisted record into the state to resume with.

    A running record whose end already passed is advanced through at most
    `MAX_CATCH_UP_TRANSITIONS` segments. Without auto-start the first boundary
    stops the session in the new segment with its full duration. With
    auto-start each step adds the next segment's duration to the overshoot;
    if two steps still leave no time, the session stays running at zero and
    the next tick performs the transition.
    """
    segment = stored.current_segment
    settings = stored.settings

    if stored.mode == MODE_PAUSED or not stored.is_running:
        remaining = stored.remaining_seconds
        if remaining <= 0:
            remaining = durations.for_segment(segment)
        return RestoredSession(
            segment=segment,
            mode=stored.mode,
            is_running=False,
            remaining_seconds=remaining,
            end_timestamp_ms=None,
            pomodoros_completed=stored.pomodoros_completed,
            settings=settings,
        )

    if stored.end_timestamp_ms is None:
        remaining = stored.remaining_seconds
        if remaining <= 0:
            remaining = durations.for_segment(segment)
        return RestoredSession(
            segment=segment,
            mode=MODE_PAUSED,
            is_running=False,
            remaining_seconds=remaining,
            end_timestamp_ms=None,
            pomodoros_completed=stored.pomodoros_completed,
            settings=settings,
        )

    end_ms = stored.end_timestamp_ms
    completed = stored.pomodoros_completed
    remaining = remaining_until(end_ms, now_ms)
    transitions = 0

    while remaining <= 0 and transitions < MAX_CATCH_UP_TRANSITIONS:
        segment, completed = next_segment(segment, completed, settings.long_break_every)
        transitions += 1
        duration = durations.for_segment(segment)
        if not auto_start:
            return RestoredSession(
                segment=segment,
                mode=segment,
                is_running=False,
                remaining_seconds=duration,
                end_timestamp_ms=None,
                pomodoros_completed=completed,
                settings=settings,
                transitions=transitions,
            )
        remaining += duration
        end_ms += duration * 1000

    if remaining <= 0:
        remaining = 0
        end_ms = now_ms

    return RestoredSession(
        segment=segment,
        mode=segment,
        is_running=True,
        remaining_seconds=remaining,
        end_timestamp_ms=end_ms,
        pomodoros_completed=completed,
        settings=settings,
        transitions=transitions,
    )
