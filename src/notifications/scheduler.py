"""Event-loop reminder scheduling for "segment ends in N seconds" notices."""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from pomodoro.constants import REMINDER_BREAK, REMINDER_FOCUS

REMINDER_CONTENT: dict[str, tuple[str, str]] = {
    REMINDER_FOCUS: ("Focus finished", "Time to take a break."),
    REMINDER_BREAK: ("Break finished", "Time to focus."),
}


@dataclass(frozen=True)
class Reminder:
    """Reminder payload handed to the delivery sink when it comes due."""
    kind: str
    title: str
    body: str
    due_at: datetime


class ReminderSink(Protocol):
    def deliver(self, reminder: Reminder) -> None:
        ...


class ReminderScheduler:
    """Keeps pending reminders as loop timers; delivery is best-effort."""

    def __init__(
        self,
        sink: Optional[ReminderSink] = None,
        *,
        enabled: bool = True,
        logger: Optional[logging.Logger] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        self._sink = sink
        self._enabled = enabled
        self._logger = logger or logging.getLogger("notifications")
        self._now = now_fn or (lambda: datetime.now(timezone.utc))
        self._pending: dict[int, asyncio.TimerHandle] = {}
        self._tokens = itertools.count(1)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def schedule_reminder(self, kind: str, seconds_from_now: int) -> None:
        if not self._enabled or seconds_from_now <= 0:
            return
        content = REMINDER_CONTENT.get(kind)
        if content is None:
            self._logger.warning("Unknown reminder kind: %s", kind)
            return

        try:
            delay = max(1, round(seconds_from_now))
            title, body = content
            reminder = Reminder(
                kind=kind,
                title=title,
                body=body,
                due_at=self._now() + timedelta(seconds=delay),
            )
            token = next(self._tokens)
            loop = asyncio.get_running_loop()
            self._pending[token] = loop.call_later(delay, self._fire, token, reminder)
            self._logger.debug("Reminder scheduled: kind=%s in=%ss", kind, delay)
        except Exception as error:
            self._logger.warning("Failed to schedule reminder: %s", error)

    async def cancel_all_reminders(self) -> None:
        if not self._pending:
            return
        for handle in self._pending.values():
            handle.cancel()
        self._logger.debug("Cancelled %d pending reminder(s)", len(self._pending))
        self._pending.clear()

    def _fire(self, token: int, reminder: Reminder) -> None:
        self._pending.pop(token, None)
        self._logger.info("Reminder due: %s - %s", reminder.title, reminder.body)
        if self._sink is None:
            return
        try:
            self._sink.deliver(reminder)
        except Exception as error:
            self._logger.warning("Failed to deliver reminder: %s", error)
