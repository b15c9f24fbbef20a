from .recovery import RestoredSession, next_segment, resolve_stored_session
from .service import PomodoroSession
from .settings import (
    PomodoroSettings,
    SegmentDurations,
    sanitize_settings,
    segment_durations,
)
from .snapshot import StoredSession, parse_stored_session
from .types import (
    Segment,
    SessionAction,
    SessionActionResult,
    SessionMode,
    SessionTick,
    SessionTransition,
    SessionView,
    format_clock,
)

__all__ = [
    "PomodoroSession",
    "PomodoroSettings",
    "RestoredSession",
    "Segment",
    "SegmentDurations",
    "SessionAction",
    "SessionActionResult",
    "SessionMode",
    "SessionTick",
    "SessionTransition",
    "SessionView",
    "StoredSession",
    "format_clock",
    "next_segment",
    "parse_stored_session",
    "resolve_stored_session",
    "sanitize_settings",
    "segment_durations",
]
