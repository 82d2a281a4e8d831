"""Replay-latest broadcast channel used to publish repository snapshots."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class LatestValueStream(Generic[T]):
    """Publish/subscribe channel that always holds the last published value.

    New subscribers receive the current value first, then values published
    afterwards. Values are conflated: a subscriber that falls behind only
    sees the newest one, so each subscriber buffers at most one value.
    Must be driven from a single event loop.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._queues: set[asyncio.Queue[object]] = set()
        self._closed = False

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)

    def publish(self, value: T) -> None:
        """Cache ``value`` and hand it to every subscriber, replacing unread ones."""
        if self._closed:
            raise RuntimeError("stream is closed")
        self._value = value
        for queue in self._queues:
            while not queue.empty():
                queue.get_nowait()
            queue.put_nowait(value)

    def close(self) -> None:
        """Finish every subscriber iterator; further publishes fail."""
        if self._closed:
            return
        self._closed = True
        for queue in self._queues:
            queue.put_nowait(_CLOSED)

    async def subscribe(self) -> AsyncIterator[T]:
        """Yield the cached value, then each subsequently published one."""
        queue: asyncio.Queue[object] = asyncio.Queue()
        queue.put_nowait(self._value)
        if self._closed:
            queue.put_nowait(_CLOSED)
        self._queues.add(queue)
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item  # type: ignore[misc]
        finally:
            self._queues.discard(queue)
