"""Runtime orchestration: wires the session to its gateways and the UI bridge."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from app_config import AppConfig
from feedback import build_feedback_service
from notifications import ReminderScheduler
from persistence import JsonFileKeyValueStore, PomodoroStateStore
from pomodoro import PomodoroSession, SessionTransition
from pomodoro.constants import ACTION_SYNC, REASON_STARTUP
from server import UIServer

from .commands import SessionCommandDispatcher
from .ticks import SessionTicker, TickProcessor
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[[asyncio.Event], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    ui_server: Optional[UIServer]
    hooks: Optional[RuntimeHooks] = None


class RuntimeEngine:
    """Owns the session, its tick loop, and the UI bridge for one process run."""

    def __init__(
        self,
        bootstrap: RuntimeBootstrap,
        *,
        now_ms_fn: Optional[Callable[[], int]] = None,
    ):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        config = bootstrap.app_config

        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._store = PomodoroStateStore(
            JsonFileKeyValueStore(config.storage.directory),
            logger=logging.getLogger("persistence"),
        )
        self._reminders = ReminderScheduler(
            self._ui,
            enabled=config.notifications.enabled,
            logger=logging.getLogger("notifications"),
        )
        self._feedback = build_feedback_service(
            config.feedback,
            haptics=self._ui,
            logger=logging.getLogger("feedback"),
        )

        timer = config.pomodoro
        self._session = PomodoroSession(
            settings={
                "focus_minutes": timer.focus_minutes,
                "short_break_minutes": timer.short_break_minutes,
                "long_break_minutes": timer.long_break_minutes,
                "long_break_every": timer.long_break_every,
            },
            auto_start=timer.auto_start,
            dev_durations=timer.dev_durations,
            store=self._store,
            reminders=self._reminders,
            feedback=self._feedback,
            logger=logging.getLogger("pomodoro"),
            now_ms_fn=now_ms_fn,
        )
        self._session.add_observer(self)

        self._tick_processor = TickProcessor(self._ui, self._logger)
        self._ticker = SessionTicker(
            self._session,
            on_tick=self._tick_processor.handle_session_tick,
            interval_seconds=timer.tick_interval_seconds,
            logger=logging.getLogger("ticker"),
        )
        self._dispatcher = SessionCommandDispatcher(
            session=self._session,
            ui=self._ui,
            logger=self._logger,
        )

        ui_server = bootstrap.ui_server
        if ui_server is not None:
            ui_server.set_command_handler(self._dispatcher.handle_command)
            ui_server.set_view_provider(lambda: self._session.view().to_payload())

    @property
    def session(self) -> PomodoroSession:
        return self._session

    @property
    def dispatcher(self) -> SessionCommandDispatcher:
        return self._dispatcher

    @property
    def ticker(self) -> SessionTicker:
        return self._ticker

    def on_transition(self, transition: SessionTransition) -> None:
        self._ui.publish_session_update(
            transition.view,
            action=transition.action,
            accepted=True,
            reason=transition.reason,
        )
        self._ticker.sync()

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> int:
        """Restore state, serve clients, and tick until `stop_event` is set."""
        stop_event = stop_event or asyncio.Event()
        hooks = self._bootstrap.hooks
        if hooks is not None:
            hooks.setup_signal_handlers(stop_event)

        try:
            await self._session.rehydrate()
            self._publish_startup_sync()

            ui_server = self._bootstrap.ui_server
            if ui_server is not None:
                await ui_server.start()

            self._ticker.sync()
            self._logger.info("Ready! Session is %s", self._session.view().mode)
            await stop_event.wait()
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            self._ui.publish_error(f"Runtime failed: {error}")
            return 1
        finally:
            await self._shutdown()

    def _publish_startup_sync(self) -> None:
        self._ui.publish_session_update(
            self._session.view(),
            action=ACTION_SYNC,
            accepted=True,
            reason=REASON_STARTUP,
        )

    async def _shutdown(self) -> None:
        self._logger.info("Stopping ticker...")
        await self._ticker.stop()

        self._logger.info("Flushing session effects...")
        try:
            await self._session.close()
        except Exception as error:
            self._logger.error("Error closing session: %s", error, exc_info=True)

        await self._reminders.cancel_all_reminders()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                await ui_server.stop()
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
