"""Bounded channels connecting pipeline stages.

A :class:`BoundedChannel` wraps :class:`asyncio.Queue` with an explicit
``closed`` state and a high-water mark.  Senders block while the channel is
full, which is what throttles the generator and the workers.  Receivers never
block: they call :meth:`BoundedChannel.try_recv` and poll.
"""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

from subsweep.core.errors import ChannelClosed, ChannelEmpty

T = TypeVar("T")

TASK_QUEUE_SIZE = 10_000
RESULT_QUEUE_SIZE = 1_000


class BoundedChannel(Generic[T]):
    """FIFO channel with a fixed capacity.

    Example::

        channel: BoundedChannel[str] = BoundedChannel(capacity=100, name="tasks")
        await channel.send("www")
        item = channel.try_recv()
    """

    def __init__(self, capacity: int, name: str = "channel") -> None:
        if capacity < 1:
            raise ValueError(f"Channel capacity must be positive, got {capacity}")
        self.name = name
        self.capacity = capacity
        self._queue: asyncio.Queue[T] = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self._peak = 0
        self._sent = 0
        # set whenever a slot frees up or the channel closes
        self._space = asyncio.Event()

    async def send(self, item: T) -> None:
        """Put *item* on the channel, waiting while it is full.

        A sender still waiting for room when the channel is closed gives up
        without enqueuing *item*.

        Raises:
            ChannelClosed: If the channel is closed before *item* is queued.
        """
        while True:
            if self._closed:
                raise ChannelClosed(f"{self.name} is closed")
            if not self._queue.full():
                break
            self._space.clear()
            await self._space.wait()
        self._queue.put_nowait(item)
        self._sent += 1
        depth = self._queue.qsize()
        if depth > self._peak:
            self._peak = depth

    def try_recv(self) -> T:
        """Return the next item without waiting.

        Raises:
            ChannelEmpty: If nothing is queued right now.
        """
        try:
            item = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            raise ChannelEmpty(self.name) from None
        self._space.set()
        return item

    def close(self) -> None:
        """Refuse further sends, including ones waiting for room.

        Items already queued can still be received.
        """
        self._closed = True
        self._space.set()

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    @property
    def peak(self) -> int:
        """Highest number of items ever held at once."""
        return self._peak

    @property
    def sent(self) -> int:
        """Total number of items successfully sent."""
        return self._sent

    def __repr__(self) -> str:
        return f"<BoundedChannel {self.name} {self.qsize()}/{self.capacity}>"
