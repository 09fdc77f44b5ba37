"""Hand-off queue between span producers and the flush coordinator."""

import asyncio
from collections import deque
from typing import Protocol

from ..logging_config import get_logger
from ..models import FinishedSpan

logger = get_logger(__name__)


class ISpanQueue(Protocol):
    """Unbounded multi-producer / single-consumer queue of finished spans."""

    def push(self, span: FinishedSpan) -> None:
        """Append a span. Never blocks, never raises."""
        ...

    async def wait_available(self) -> None:
        """Suspend until at least one span is queued."""
        ...

    def drain(self) -> list[FinishedSpan]:
        """Remove and return every queued span."""
        ...

    def qsize(self) -> int:
        """Number of queued spans."""
        ...


class HandoffQueue:
    """Thread-safe hand-off queue with an asyncio wake-up for the consumer.

    Producers may run on any thread (sync request handlers, the event loop
    itself). ``deque.append`` and ``deque.popleft`` are atomic, and the
    consumer is woken through ``loop.call_soon_threadsafe``.
    """

    def __init__(self):
        self._items: deque[FinishedSpan] = deque()
        self._available = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None

    def push(self, span: FinishedSpan) -> None:
        """Append a span and wake the consumer if it is waiting."""
        self._items.append(span)

        loop = self._loop
        if loop is None or loop.is_closed():
            # Consumer not bound yet, it checks the deque before waiting
            return
        try:
            loop.call_soon_threadsafe(self._available.set)
        except RuntimeError:
            # Loop closed between the check and the call
            logger.debug("Consumer loop closed, span queued without wake-up")

    async def wait_available(self) -> None:
        """Suspend until at least one span is queued."""
        self._loop = asyncio.get_running_loop()
        while not self._items:
            # Clear before re-checking so a concurrent push cannot be missed
            self._available.clear()
            if self._items:
                break
            await self._available.wait()

    def get_nowait(self) -> FinishedSpan:
        """Remove and return the oldest span. Raises IndexError when empty."""
        return self._items.popleft()

    def drain(self) -> list[FinishedSpan]:
        """Remove and return every queued span."""
        drained: list[FinishedSpan] = []
        while True:
            try:
                drained.append(self._items.popleft())
            except IndexError:
                return drained

    def qsize(self) -> int:
        """Number of queued spans."""
        return len(self._items)

    def empty(self) -> bool:
        return not self._items
