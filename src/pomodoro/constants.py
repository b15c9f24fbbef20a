"""Mode, segment, action, and reason constants used by the pomodoro session."""

from __future__ import annotations

SEGMENT_FOCUS = "focus"
SEGMENT_SHORT_BREAK = "shortBreak"
SEGMENT_LONG_BREAK = "longBreak"

SEGMENTS: tuple[str, ...] = (SEGMENT_FOCUS, SEGMENT_SHORT_BREAK, SEGMENT_LONG_BREAK)
BREAK_SEGMENTS: frozenset[str] = frozenset({SEGMENT_SHORT_BREAK, SEGMENT_LONG_BREAK})

MODE_IDLE = "idle"
MODE_FOCUS = SEGMENT_FOCUS
MODE_SHORT_BREAK = SEGMENT_SHORT_BREAK
MODE_LONG_BREAK = SEGMENT_LONG_BREAK
MODE_PAUSED = "paused"

MODES: tuple[str, ...] = (
    MODE_IDLE,
    MODE_FOCUS,
    MODE_SHORT_BREAK,
    MODE_LONG_BREAK,
    MODE_PAUSED,
)

SEGMENT_LABELS: dict[str, str] = {
    SEGMENT_FOCUS: "Focus",
    SEGMENT_SHORT_BREAK: "Short break",
    SEGMENT_LONG_BREAK: "Long break",
}

REMINDER_FOCUS = "focus"
REMINDER_BREAK = "break"

DEFAULT_FOCUS_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_LONG_BREAK_EVERY = 4

FOCUS_MINUTES_RANGE = (1, 90)
SHORT_BREAK_MINUTES_RANGE = (1, 30)
LONG_BREAK_MINUTES_RANGE = (1, 60)
MIN_LONG_BREAK_EVERY = 1

# Segment lengths in seconds used when dev durations are enabled.
DEV_SEGMENT_SECONDS: dict[str, int] = {
    SEGMENT_FOCUS: 5,
    SEGMENT_SHORT_BREAK: 3,
    SEGMENT_LONG_BREAK: 5,
}

MAX_CATCH_UP_TRANSITIONS = 2

# Stored numbers beyond these bounds are treated as corrupt.
MAX_STORED_TIMESTAMP_MS = 2**53 - 1
MAX_STORED_SECONDS = 24 * 60 * 60

STORAGE_KEY = "pomodoro.state.v1"

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_RESET = "reset"
ACTION_SKIP_BREAK = "skip_break"
ACTION_UPDATE_SETTINGS = "update_settings"

ACTION_TICK = "tick"
ACTION_ADVANCE = "advance"
ACTION_REHYDRATE = "rehydrate"

REASON_STARTED = "started"
REASON_RESUMED = "resumed"
REASON_PAUSED = "paused"
REASON_RESET = "reset"
REASON_BREAK_SKIPPED = "break_skipped"
REASON_SETTINGS_UPDATED = "settings_updated"
REASON_ALREADY_RUNNING = "already_running"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_PAUSED = "not_paused"
REASON_NOT_ON_BREAK = "not_on_break"
REASON_CLOSED = "closed"

REASON_TICK = "tick"
REASON_COMPLETED = "completed"
REASON_RESTORED = "restored"
REASON_CAUGHT_UP = "caught_up"

ACTION_SYNC = "sync"
REASON_STARTUP = "startup"
