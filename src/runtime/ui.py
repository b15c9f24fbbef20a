from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_ERROR, EVENT_HAPTIC, EVENT_REMINDER, EVENT_SESSION
from feedback import HapticPulse
from notifications import Reminder
from pomodoro import SessionView


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class RuntimeUIPublisher:
    """Turns session updates, reminders, and haptics into UI events.

    Doubles as the reminder sink and the haptic sink, so both reach the
    connected client over the websocket bridge.
    """

    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_session_update(
        self,
        view: SessionView,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
    ) -> None:
        payload: dict[str, Any] = {"action": action, **view.to_payload()}
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        self.publish(EVENT_SESSION, **payload)

    def publish_error(self, message: str) -> None:
        self.publish(EVENT_ERROR, message=message)

    def deliver(self, reminder: Reminder) -> None:
        self.publish(
            EVENT_REMINDER,
            kind=reminder.kind,
            title=reminder.title,
            body=reminder.body,
            due_at=reminder.due_at.isoformat(),
        )

    def vibrate(self, name: str, pattern: tuple[HapticPulse, ...]) -> None:
        self.publish(
            EVENT_HAPTIC,
            name=name,
            pattern=[pulse.to_payload() for pulse in pattern],
        )
