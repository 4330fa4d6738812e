"""
Asynchronous output channel used by the poller to hand diff events and
errors to consumers without blocking the next poll cycle.
"""

import asyncio
import logging
from typing import Generic, TypeVar

from dirpoll.config.settings import BackpressurePolicy
from dirpoll.models.exceptions import ChannelClosedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EventChannel(Generic[T]):
    """
    Single-producer queue with an explicit backpressure policy and a close signal.

    * ``GROW``: unbounded, ``publish()`` never waits and never drops.
    * ``BLOCK``: bounded, ``publish()`` waits until the consumer frees a slot.
    * ``DROP_OLDEST``: bounded, the oldest queued item makes room for the new one.

    Closing keeps already queued items readable; consumers stop once the
    channel is closed and drained. All methods must be called from the
    event loop thread.
    """

    def __init__(self, name: str, capacity: int = 0, policy: BackpressurePolicy = BackpressurePolicy.GROW):
        if policy == BackpressurePolicy.GROW and capacity != 0:
            raise ValueError("An unbounded channel cannot have a capacity")
        if policy != BackpressurePolicy.GROW and capacity <= 0:
            raise ValueError(f"Policy '{policy.value}' needs a positive capacity")

        self.name = name
        self.capacity = capacity
        self.policy = policy
        self.published = 0
        self.dropped = 0

        self._queue: asyncio.Queue[T] = asyncio.Queue(maxsize=capacity)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def qsize(self) -> int:
        """Number of items waiting to be consumed."""
        return self._queue.qsize()

    async def publish(self, item: T) -> bool:
        """
        Hand an item to the consumer according to the backpressure policy.

        Returns:
            True if the item was queued, False if the channel is closed
        """
        if self.closed:
            logger.debug("Channel %s is closed, refusing item", self.name)
            return False

        if self._queue.full():
            if self.policy == BackpressurePolicy.BLOCK:
                return await self._publish_blocking(item)
            self._queue.get_nowait()
            self.dropped += 1
            logger.warning("Channel %s is full, dropped oldest item (%d dropped so far)", self.name, self.dropped)

        self._queue.put_nowait(item)
        self.published += 1
        return True

    async def _publish_blocking(self, item: T) -> bool:
        put_task = asyncio.ensure_future(self._queue.put(item))
        close_task = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait({put_task, close_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            close_task.cancel()
            if not put_task.done():
                put_task.cancel()

        if put_task in done:
            self.published += 1
            return True

        logger.debug("Channel %s closed while waiting for space", self.name)
        return False

    async def get(self) -> T:
        """
        Wait for the next item.

        Raises:
            ChannelClosedError: If the channel is closed and drained
        """
        while True:
            if not self._queue.empty():
                return self._queue.get_nowait()
            if self.closed:
                raise ChannelClosedError(self.name)

            get_task = asyncio.ensure_future(self._queue.get())
            close_task = asyncio.ensure_future(self._closed.wait())
            try:
                done, _ = await asyncio.wait({get_task, close_task}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                close_task.cancel()
                if not get_task.done():
                    get_task.cancel()

            if get_task in done:
                return get_task.result()

    def get_nowait(self) -> T:
        """Take the next item if one is queued."""
        if self._queue.empty() and self.closed:
            raise ChannelClosedError(self.name)
        return self._queue.get_nowait()

    def drain(self) -> list[T]:
        """Take every queued item without waiting."""
        items = []
        while not self._queue.empty():
            items.append(self._queue.get_nowait())
        return items

    def close(self) -> None:
        """Stop accepting items. Idempotent."""
        if self.closed:
            return
        self._closed.set()
        logger.debug("Channel %s closed with %d items pending", self.name, self._queue.qsize())

    def __aiter__(self) -> "EventChannel[T]":
        return self

    async def __anext__(self) -> T:
        try:
            return await self.get()
        except ChannelClosedError:
            raise StopAsyncIteration from None
