"""Event serialization, sticky replay state, and inbound command parsing."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from contracts.ui_protocol import MESSAGE_COMMAND, STICKY_EVENT_ORDER, STICKY_EVENT_TYPES


class ClientMessageError(ValueError):
    """Raised when a websocket client sends something that is not a command."""


@dataclass(frozen=True)
class ClientCommand:
    """A command request received from a websocket client."""
    name: str
    message: dict[str, Any] = field(default_factory=dict)


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def parse_client_message(raw: str | bytes) -> ClientCommand:
    """Decode `{"type": "command", "command": <name>, ...}` into a `ClientCommand`."""
    try:
        data = json.loads(raw)
    except ValueError as error:
        raise ClientMessageError("Invalid JSON message") from error

    if not isinstance(data, dict) or data.get("type") != MESSAGE_COMMAND:
        raise ClientMessageError("Unsupported message type")

    name = data.get("command")
    if not isinstance(name, str) or not name.strip():
        raise ClientMessageError("Command name is required")

    return ClientCommand(name=name.strip(), message=data)


class StickyEventStore:
    """Latest event per sticky type, replayed to clients when they connect."""
    def __init__(
        self,
        sticky_types: Iterable[str] = STICKY_EVENT_TYPES,
        order: Optional[Iterable[str]] = None,
    ):
        self._sticky_types = frozenset(sticky_types)
        if order is None:
            known = tuple(key for key in STICKY_EVENT_ORDER if key in self._sticky_types)
            order = known + tuple(sorted(self._sticky_types.difference(known)))
        self._order = tuple(order)
        self._events: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._events)

    def remember(self, event_type: str, message: str) -> bool:
        """Keep `message` if its type is sticky; returns whether it was kept."""
        if event_type not in self._sticky_types:
            return False
        self._events[event_type] = message
        return True

    def forget(self, event_type: str) -> None:
        self._events.pop(event_type, None)

    def snapshot(self) -> list[str]:
        return [self._events[key] for key in self._order if key in self._events]
