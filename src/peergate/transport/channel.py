"""In-process outbound channel between a group policy and the runtime.

The policy ``await``s :meth:`OutboundChannel.send`; the runtime drains the
channel with :meth:`OutboundChannel.recv`. Sending on a closed channel raises
:class:`~peergate.core.exceptions.ChannelClosedError`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from ..core.exceptions import ChannelClosedError
from .messages import JoinVerdict

logger = logging.getLogger(__name__)


class OutboundChannel:
    """Bounded asyncio queue of :class:`JoinVerdict` messages.

    Closing wakes every task blocked in :meth:`send` or :meth:`recv`.
    """

    def __init__(self, max_size: int = 1000):
        self._queue: asyncio.Queue[JoinVerdict] = asyncio.Queue(maxsize=max_size)
        self._closed = False
        self._closed_event = asyncio.Event()
        self._stats = {"sent": 0, "received": 0, "rejected_closed": 0}

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: JoinVerdict) -> None:
        """Queue a message for the runtime, waiting if the channel is full.

        Raises:
            ChannelClosedError: If the channel is closed, including while
                this call is waiting for room.
        """
        if not self._closed:
            if not self._queue.full():
                self._queue.put_nowait(message)
                self._stats["sent"] += 1
                return
            put = await self._until_closed(self._queue.put(message))
            if not put.cancelled():
                self._stats["sent"] += 1
                return
        self._stats["rejected_closed"] += 1
        raise ChannelClosedError("Outbound channel to runtime is closed")

    async def recv(self) -> JoinVerdict | None:
        """Wait for the next message; returns None once closed and drained."""
        while True:
            if not self._queue.empty():
                message = self._queue.get_nowait()
                self._stats["received"] += 1
                return message
            if self._closed:
                return None
            get = await self._until_closed(self._queue.get())
            if not get.cancelled():
                self._stats["received"] += 1
                return get.result()

    async def _until_closed(self, operation: Coroutine[Any, Any, Any]) -> asyncio.Future:
        """Run a queue operation until it finishes or the channel closes.

        The returned future is cancelled if closing won the race.
        """
        op = asyncio.ensure_future(operation)
        closed = asyncio.ensure_future(self._closed_event.wait())
        try:
            await asyncio.wait({op, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [task for task in (op, closed) if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        return op

    def drain(self) -> list[JoinVerdict]:
        """Pop every queued message without waiting."""
        messages = []
        while not self._queue.empty():
            messages.append(self._queue.get_nowait())
        self._stats["received"] += len(messages)
        return messages

    def close(self) -> None:
        if not self._closed:
            logger.debug("Outbound channel closed with %d queued message(s)", self._queue.qsize())
        self._closed = True
        self._closed_event.set()

    def get_stats(self) -> dict[str, int]:
        return {**self._stats, "queued": self._queue.qsize()}

    def __len__(self) -> int:
        return self._queue.qsize()
