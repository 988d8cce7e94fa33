"""SQLite-backed local store."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from collections.abc import Iterable
from pathlib import Path

from peopleinspace._constants import DEFAULT_DATABASE_PATH
from peopleinspace.exceptions import StorageError
from peopleinspace.live import SnapshotBroadcast, Subscription
from peopleinspace.models import Assignment
from peopleinspace.store.base import dedupe_by_name
from peopleinspace.store.schema import apply_schema, configure_connection

_logger = logging.getLogger(__name__)

_MEMORY_PATH = ":memory:"


class SqliteStore:
    """Roster cache persisted in a single SQLite table.

    Database work runs on worker threads via :func:`asyncio.to_thread`.
    One connection is shared and guarded by a lock, so a reader can never
    run between the ``DELETE`` and the ``INSERT`` of a replace.

    Usage::

        store = await SqliteStore("peopleinspace.db").initialize()
        async with store.observe_all() as snapshots:
            async for people in snapshots:
                ...
    """

    def __init__(self, path: str | Path = DEFAULT_DATABASE_PATH) -> None:
        self._path = str(path)
        self._conn: sqlite3.Connection | None = None
        self._conn_lock = threading.Lock()
        self._write_lock = asyncio.Lock()
        self._broadcast: SnapshotBroadcast[list[Assignment]] = SnapshotBroadcast([])
        self._closed = False
        self._pending_commits: set[asyncio.Task[None]] = set()

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_initialized(self) -> bool:
        return self._conn is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> SqliteStore:
        """Open the database, apply the schema and seed the live view.

        Rows left by a previous run become the first snapshot, so
        consumers see stale data rather than nothing until the next sync.
        """
        async with self._write_lock:
            if self._closed:
                raise StorageError("Store is closed")
            if self._conn is not None:
                return self
            self._conn = await asyncio.to_thread(self._open)
            rows = await asyncio.to_thread(self._select_all_sync)
            _logger.debug("Opened %s with %d cached row(s)", self._path, len(rows))
            if rows:
                self._broadcast.publish(rows)
        return self

    async def close(self) -> None:
        """Close the connection and end every subscription.

        Commits still running for cancelled callers finish first.
        """
        if self._closed:
            return
        self._closed = True
        if self._pending_commits:
            await asyncio.gather(*self._pending_commits, return_exceptions=True)
        self._broadcast.close()
        conn = self._conn
        self._conn = None
        if conn is not None:
            await asyncio.to_thread(self._close_sync, conn)

    def _open(self) -> sqlite3.Connection:
        try:
            if self._path != _MEMORY_PATH:
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._path, check_same_thread=False, isolation_level=None)
        except (sqlite3.Error, OSError) as exc:
            raise StorageError(f"Cannot open database {self._path}: {exc}") from exc

        try:
            configure_connection(conn)
            apply_schema(conn)
        except StorageError:
            conn.close()
            raise
        except sqlite3.Error as exc:
            conn.close()
            raise StorageError(f"Cannot initialize database {self._path}: {exc}") from exc
        return conn

    def _close_sync(self, conn: sqlite3.Connection) -> None:
        with self._conn_lock:
            conn.close()

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            if self._closed:
                raise StorageError("Store is closed")
            raise StorageError("Store not initialized. Call 'await store.initialize()' first")
        return self._conn

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def select_all(self) -> list[Assignment]:
        """Return the cached roster in insertion order."""
        self._require_conn()
        return await asyncio.to_thread(self._select_all_sync)

    def observe_all(self) -> Subscription[list[Assignment]]:
        return self._broadcast.subscribe()

    def _select_all_sync(self) -> list[Assignment]:
        with self._conn_lock:
            conn = self._require_conn()
            try:
                rows = conn.execute("SELECT name, craft FROM people ORDER BY rowid").fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Reading roster from {self._path} failed: {exc}") from exc
        return [Assignment(name=name, craft=craft) for name, craft in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def replace_all(self, roster: Iterable[Assignment]) -> None:
        """Replace the table contents with *roster* in one transaction.

        The commit and the snapshot publish are shielded together: a
        cancelled caller cannot leave subscribers behind the database.
        """
        if self._closed:
            raise StorageError("Store is closed")
        self._require_conn()
        snapshot = dedupe_by_name(roster)
        task = asyncio.ensure_future(self._commit(snapshot))
        self._pending_commits.add(task)
        task.add_done_callback(self._on_commit_done)
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            task.add_done_callback(self._log_abandoned_commit)
            raise

    def _on_commit_done(self, task: asyncio.Task[None]) -> None:
        self._pending_commits.discard(task)
        if not task.cancelled():
            # Mark retrieved; a waiting caller already got it.
            task.exception()

    def _log_abandoned_commit(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Commit to %s failed after its caller was cancelled", self._path, exc_info=exc)

    async def _commit(self, snapshot: list[Assignment]) -> None:
        # Holding the async lock across commit + publish keeps snapshot
        # order identical to commit order.
        async with self._write_lock:
            await asyncio.to_thread(self._replace_all_sync, snapshot)
            _logger.debug("Committed %d row(s) to %s", len(snapshot), self._path)
            if not self._broadcast.closed:
                self._broadcast.publish(snapshot)

    def _replace_all_sync(self, snapshot: list[Assignment]) -> None:
        with self._conn_lock:
            conn = self._require_conn()
            try:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    conn.execute("DELETE FROM people")
                    conn.executemany(
                        "INSERT INTO people (name, craft) VALUES (?, ?)",
                        [assignment.as_row() for assignment in snapshot],
                    )
                except BaseException:
                    conn.execute("ROLLBACK")
                    raise
                conn.execute("COMMIT")
            except sqlite3.Error as exc:
                raise StorageError(f"Replacing roster in {self._path} failed: {exc}") from exc
