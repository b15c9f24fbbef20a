"""Immutable views and result envelopes published by the pomodoro session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional

from .constants import BREAK_SEGMENTS, MODE_PAUSED
from .settings import PomodoroSettings

SessionMode = Literal["idle", "focus", "shortBreak", "longBreak", "paused"]
Segment = Literal["focus", "shortBreak", "longBreak"]
SessionAction = Literal[
    "start",
    "pause",
    "resume",
    "reset",
    "skip_break",
    "update_settings",
    "tick",
    "advance",
    "rehydrate",
]


def format_clock(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


@dataclass(frozen=True)
class SessionView:
    """Read-only session state exposed to presentation code."""
    mode: SessionMode
    segment: Segment
    is_running: bool
    remaining_seconds: int
    pomodoros_completed: int
    label: str
    settings: PomodoroSettings

    @property
    def clock_text(self) -> str:
        return format_clock(self.remaining_seconds)

    @property
    def is_paused(self) -> bool:
        return self.mode == MODE_PAUSED

    @property
    def is_break(self) -> bool:
        return self.mode in BREAK_SEGMENTS

    def to_payload(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "segment": self.segment,
            "is_running": self.is_running,
            "remaining_seconds": self.remaining_seconds,
            "clock": self.clock_text,
            "pomodoros_completed": self.pomodoros_completed,
            "label": self.label,
            "settings": self.settings.to_dict(),
        }


@dataclass(frozen=True)
class SessionActionResult:
    """Result envelope returned after applying a session command."""
    action: SessionAction
    accepted: bool
    reason: str
    view: SessionView


@dataclass(frozen=True)
class SessionTick:
    """Tick payload emitted while a segment is counting down."""
    view: SessionView
    completed: bool = False
    finished_segment: Optional[Segment] = None


@dataclass(frozen=True)
class SessionTransition:
    """Record handed to transition observers after every state change."""
    action: SessionAction
    reason: str
    previous_mode: SessionMode
    view: SessionView
