"""Websocket bridge streaming session events to UI clients."""

from .config import ServerConfigurationError, UIServerConfig
from .events import (
    ClientCommand,
    ClientMessageError,
    StickyEventStore,
    make_event,
    parse_client_message,
)
from .service import UIServer

__all__ = [
    "ClientCommand",
    "ClientMessageError",
    "ServerConfigurationError",
    "StickyEventStore",
    "UIServerConfig",
    "UIServer",
    "make_event",
    "parse_client_message",
]
