"""Protocols for the gateways and observers the pomodoro session talks to."""

from __future__ import annotations

from typing import Optional, Protocol

from .snapshot import StoredSession
from .types import SessionTransition


class SessionStore(Protocol):
    """Best-effort persistence of the single session record."""
    async def load(self) -> Optional[StoredSession]:
        ...

    async def save(self, stored: StoredSession) -> None:
        ...

    async def clear(self) -> None:
        ...


class ReminderGateway(Protocol):
    """Schedules the "segment ends in N seconds" reminder."""
    async def schedule_reminder(self, kind: str, seconds_from_now: int) -> None:
        ...

    async def cancel_all_reminders(self) -> None:
        ...


class FeedbackGateway(Protocol):
    """Short sound and haptic cues at session start and segment end."""
    async def play_start_cue(self) -> None:
        ...

    async def play_focus_end_cue(self) -> None:
        ...

    async def play_break_end_cue(self) -> None:
        ...

    async def haptic_start(self) -> None:
        ...

    async def haptic_end(self) -> None:
        ...


class TransitionObserver(Protocol):
    def on_transition(self, transition: SessionTransition) -> None:
        ...
