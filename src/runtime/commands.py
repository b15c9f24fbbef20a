"""Dispatcher that executes client commands against the pomodoro session."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from contracts.ui_protocol import (
    COMMAND_PAUSE,
    COMMAND_RESET,
    COMMAND_RESUME,
    COMMAND_SKIP_BREAK,
    COMMAND_START,
    COMMAND_UPDATE_SETTINGS,
    REASON_INVALID_SETTINGS,
    REASON_UNSUPPORTED_COMMAND,
)
from pomodoro import PomodoroSession, SessionActionResult

from .ui import RuntimeUIPublisher


class SessionCommandDispatcher:
    """Routes named commands to session methods and reports the outcome.

    Accepted commands reach the UI through the session's transition
    observers; rejections are published here so clients still see them.
    """

    def __init__(
        self,
        *,
        session: PomodoroSession,
        ui: RuntimeUIPublisher,
        logger: logging.Logger,
    ):
        self._session = session
        self._ui = ui
        self._logger = logger
        self._handlers: dict[str, Callable[[Mapping[str, Any]], SessionActionResult]] = {
            COMMAND_START: lambda _message: session.start(),
            COMMAND_PAUSE: lambda _message: session.pause(),
            COMMAND_RESUME: lambda _message: session.resume(),
            COMMAND_RESET: lambda _message: session.reset(),
            COMMAND_SKIP_BREAK: lambda _message: session.skip_break(),
        }

    def handle_command(self, command: str, message: Mapping[str, Any]) -> dict[str, Any]:
        if command == COMMAND_UPDATE_SETTINGS:
            return self._handle_update_settings(message)

        handler = self._handlers.get(command)
        if handler is None:
            self._logger.warning("Unsupported command: %s", command)
            return self._rejection(REASON_UNSUPPORTED_COMMAND)

        return self._report(handler(message))

    def _handle_update_settings(self, message: Mapping[str, Any]) -> dict[str, Any]:
        settings = message.get("settings")
        if not isinstance(settings, Mapping):
            self._logger.warning("update_settings requires a settings object")
            return self._rejection(REASON_INVALID_SETTINGS)
        return self._report(self._session.update_settings(settings))

    def _report(self, result: SessionActionResult) -> dict[str, Any]:
        if not result.accepted:
            self._ui.publish_session_update(
                result.view,
                action=result.action,
                accepted=False,
                reason=result.reason,
            )
        return {
            "accepted": result.accepted,
            "reason": result.reason,
            "session": result.view.to_payload(),
        }

    def _rejection(self, reason: str) -> dict[str, Any]:
        return {
            "accepted": False,
            "reason": reason,
            "session": self._session.view().to_payload(),
        }
