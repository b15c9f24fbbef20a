"""Runtime engine exports."""

from .commands import SessionCommandDispatcher
from .loop import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from .ticks import SessionTicker, TickProcessor
from .ui import RuntimeUIPublisher

__all__ = [
    "RuntimeBootstrap",
    "RuntimeEngine",
    "RuntimeHooks",
    "RuntimeUIPublisher",
    "SessionCommandDispatcher",
    "SessionTicker",
    "TickProcessor",
]
