"""Periodic tick driver and the handler that publishes tick updates."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from pomodoro import PomodoroSession, SessionTick
from pomodoro.constants import ACTION_TICK, REASON_TICK

from .ui import RuntimeUIPublisher


class TickProcessor:
    """Publishes countdown ticks; segment changes arrive as transitions instead."""
    def __init__(self, ui: RuntimeUIPublisher, logger: logging.Logger):
        self._ui = ui
        self._logger = logger

    def handle_session_tick(self, tick: SessionTick) -> None:
        if tick.completed:
            self._logger.info(
                "Segment finished: %s -> %s",
                tick.finished_segment,
                tick.view.segment,
            )
            return

        self._ui.publish_session_update(
            tick.view,
            action=ACTION_TICK,
            accepted=True,
            reason=REASON_TICK,
        )


class SessionTicker:
    """Calls `PomodoroSession.tick()` on a fixed cadence while the session runs.

    `sync()` starts the loop when the session is running and stops it when it
    is not; call it after every transition.
    """

    def __init__(
        self,
        session: PomodoroSession,
        *,
        on_tick: Callable[[SessionTick], None],
        interval_seconds: float = 1.0,
        logger: Optional[logging.Logger] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self._session = session
        self._on_tick = on_tick
        self._interval_seconds = interval_seconds
        self._logger = logger or logging.getLogger("ticker")
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def sync(self) -> None:
        if self._session.is_running:
            if not self.is_active:
                self._task = asyncio.get_running_loop().create_task(self._run())
            return

        task = self._task
        # The loop notices the stop on its own when the tick itself ended the run.
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        self._task = None

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while self._session.is_running:
            try:
                tick = self._session.tick()
            except Exception as error:
                self._logger.error("Session tick failed: %s", error, exc_info=True)
                tick = None
            if tick is not None:
                try:
                    self._on_tick(tick)
                except Exception as error:
                    self._logger.warning("Tick handler failed: %s", error, exc_info=True)
            if not self._session.is_running:
                break
            await asyncio.sleep(self._interval_seconds)
