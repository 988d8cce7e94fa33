"""Non-persistent local store.

Same contract as :class:`~peopleinspace.store.sqlite.SqliteStore`, for
platforms without a usable filesystem and for tests. A replace swaps in
a new immutable tuple, so readers always see one whole roster.
"""

from __future__ import annotations

from collections.abc import Iterable

from peopleinspace.exceptions import StorageError
from peopleinspace.live import SnapshotBroadcast, Subscription
from peopleinspace.models import Assignment
from peopleinspace.store.base import dedupe_by_name


class MemoryStore:
    def __init__(self, initial: Iterable[Assignment] = ()) -> None:
        self._rows: tuple[Assignment, ...] = tuple(dedupe_by_name(initial))
        self._broadcast: SnapshotBroadcast[list[Assignment]] = SnapshotBroadcast(list(self._rows))
        self._initialized = False
        self._closed = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> MemoryStore:
        if self._closed:
            raise StorageError("Store is closed")
        self._initialized = True
        return self

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._initialized = False
        self._broadcast.close()

    def _require_initialized(self) -> None:
        if self._closed:
            raise StorageError("Store is closed")
        if not self._initialized:
            raise StorageError("Store not initialized. Call 'await store.initialize()' first")

    async def select_all(self) -> list[Assignment]:
        self._require_initialized()
        return list(self._rows)

    def observe_all(self) -> Subscription[list[Assignment]]:
        return self._broadcast.subscribe()

    async def replace_all(self, roster: Iterable[Assignment]) -> None:
        self._require_initialized()
        snapshot = dedupe_by_name(roster)
        self._rows = tuple(snapshot)
        self._broadcast.publish(snapshot)
