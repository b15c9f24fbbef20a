"""Ordered fire-and-forget queue for the session's asynchronous side effects."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from typing import Awaitable, Callable, Optional

Effect = Callable[[], Awaitable[None]]


class EffectQueue:
    """Runs submitted effects one at a time, in submission order.

    Submitting never blocks and never raises. A failing effect is logged and
    the queue moves on. The worker task is created on demand on the running
    event loop; effects submitted while no loop is running wait for the next
    submission or `join()` made from inside a loop.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("pomodoro.effects")
        self._pending: deque[tuple[str, Effect]] = deque()
        self._worker: Optional[asyncio.Task[None]] = None
        self._closed = False

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def submit(self, name: str, effect: Effect) -> None:
        if self._closed:
            self._logger.debug("Dropping side effect %s: queue closed", name)
            return
        self._pending.append((name, effect))
        self._ensure_worker()

    async def join(self) -> None:
        """Wait until every effect submitted so far has finished."""
        self._ensure_worker()
        while self._worker is not None and not self._worker.done():
            await asyncio.wait({self._worker})
            self._ensure_worker()

    async def close(self) -> None:
        self._closed = True
        self._pending.clear()
        worker = self._worker
        self._worker = None
        if worker is not None and not worker.done():
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker

    def _ensure_worker(self) -> None:
        if not self._pending:
            return
        if self._worker is not None and not self._worker.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._worker = loop.create_task(self._drain(), name="pomodoro-effects")

    async def _drain(self) -> None:
        while self._pending:
            name, effect = self._pending.popleft()
            try:
                await effect()
            except asyncio.CancelledError:
                raise
            except Exception as error:
                self._logger.warning("Side effect %s failed: %s", name, error)
