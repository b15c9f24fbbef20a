"""Websocket event, command, and HTTP route constants for the session bridge."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_SESSION = "session"
EVENT_REMINDER = "reminder"
EVENT_HAPTIC = "haptic"
EVENT_COMMAND_RESULT = "command_result"
EVENT_ERROR = "error"

# Inbound message type and the commands it may carry
MESSAGE_COMMAND = "command"

COMMAND_START = "start"
COMMAND_PAUSE = "pause"
COMMAND_RESUME = "resume"
COMMAND_RESET = "reset"
COMMAND_SKIP_BREAK = "skip_break"
COMMAND_UPDATE_SETTINGS = "update_settings"

COMMANDS: tuple[str, ...] = (
    COMMAND_START,
    COMMAND_PAUSE,
    COMMAND_RESUME,
    COMMAND_RESET,
    COMMAND_SKIP_BREAK,
    COMMAND_UPDATE_SETTINGS,
)

REASON_UNSUPPORTED_COMMAND = "unsupported_command"
REASON_INVALID_SETTINGS = "invalid_settings"

WEBSOCKET_PATH = "/ws"
HEALTHZ_PATH = "/healthz"
SESSION_PATH = "/session"

STICKY_EVENT_TYPES: frozenset[str] = frozenset({EVENT_SESSION, EVENT_ERROR})

STICKY_EVENT_ORDER: tuple[str, ...] = (EVENT_SESSION, EVENT_ERROR)
