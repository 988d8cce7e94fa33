"""Replay-latest broadcast of store snapshots.

The store publishes a snapshot after every committed write; each
consumer holds its own :class:`Subscription`. Delivery is latest-value:
a subscription keeps a single pending slot, so a slow consumer skips
intermediate snapshots but always ends on the newest one. Publishing
never awaits and never blocks on consumers.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class SnapshotBroadcast(Generic[T]):
    """Single-producer, multi-consumer channel that replays its latest value.

    Usage::

        broadcast = SnapshotBroadcast(initial=[])
        async with broadcast.subscribe() as snapshots:
            async for snapshot in snapshots:
                ...
    """

    def __init__(self, initial: T) -> None:
        self._latest = initial
        self._version = 0
        self._subscribers: set[Subscription[T]] = set()
        self._closed = False

    @property
    def latest(self) -> T:
        return copy.copy(self._latest)

    @property
    def version(self) -> int:
        """Number of values published so far."""
        return self._version

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, value: T) -> None:
        """Make *value* the latest snapshot and offer it to every subscriber."""
        if self._closed:
            raise RuntimeError("Cannot publish to a closed broadcast")
        self._latest = value
        self._version += 1
        _logger.debug("Publishing snapshot v%d to %d subscriber(s)", self._version, len(self._subscribers))
        for subscription in list(self._subscribers):
            subscription._offer(value)

    def subscribe(self) -> Subscription[T]:
        """Return a new, not yet attached, subscription.

        The subscription attaches on first use and then immediately
        yields the latest snapshot.
        """
        return Subscription(self)

    def close(self) -> None:
        """End every subscription. Pending snapshots are still delivered."""
        if self._closed:
            return
        self._closed = True
        subscribers = list(self._subscribers)
        self._subscribers.clear()
        for subscription in subscribers:
            subscription._finish()

    def _attach(self, subscription: Subscription[T]) -> None:
        if self._closed:
            subscription._finish()
            return
        self._subscribers.add(subscription)
        subscription._offer(self._latest)

    def _detach(self, subscription: Subscription[T]) -> None:
        self._subscribers.discard(subscription)


class Subscription(Generic[T]):
    """One consumer's view of a :class:`SnapshotBroadcast`.

    An async iterator that never ends on its own; it stops when the
    consumer calls :meth:`close` (or leaves the ``async with`` block)
    or when the broadcast is closed.
    """

    def __init__(self, broadcast: SnapshotBroadcast[T]) -> None:
        self._broadcast = broadcast
        self._wakeup = asyncio.Event()
        self._pending: T | None = None
        self._has_pending = False
        self._attached = False
        self._finished = False

    @property
    def closed(self) -> bool:
        return self._finished

    def _attach(self) -> None:
        if self._attached or self._finished:
            return
        self._attached = True
        self._broadcast._attach(self)

    def _offer(self, value: T) -> None:
        # Latest-value: overwrite whatever the consumer has not read yet.
        self._pending = value
        self._has_pending = True
        self._wakeup.set()

    def _finish(self) -> None:
        self._finished = True
        self._wakeup.set()

    def close(self) -> None:
        """Detach; no further snapshots are delivered."""
        self._broadcast._detach(self)
        self._pending = None
        self._has_pending = False
        self._finish()

    async def aclose(self) -> None:
        self.close()

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        self._attach()
        while not self._has_pending:
            if self._finished:
                raise StopAsyncIteration
            self._wakeup.clear()
            await self._wakeup.wait()
        value = self._pending
        self._pending = None
        self._has_pending = False
        return copy.copy(value)  # type: ignore[return-value]

    async def __aenter__(self) -> Subscription[T]:
        self._attach()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()
