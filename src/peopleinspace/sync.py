"""Sync engine: network -> store -> subscribers.

The engine is the only writer of the local store. One attempt runs
``Idle -> Fetching -> Applying -> Idle`` on success and
``Idle -> Fetching -> Failed -> Idle`` on a failed fetch; the store is
only touched in ``Applying``.

Concurrent :meth:`SyncEngine.sync_now` calls are coalesced: a call made
while an attempt is in flight joins that attempt and receives its
outcome instead of starting a second fetch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from peopleinspace.config import SyncSchedule
from peopleinspace.exceptions import DecodeError, NetworkError, StorageError, SyncError
from peopleinspace.models import IssPosition
from peopleinspace.remote import RemoteDataSource
from peopleinspace.store.base import LocalStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SyncState(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    APPLYING = "applying"
    FAILED = "failed"


class SyncTrigger(StrEnum):
    STARTUP = "startup"
    MANUAL = "manual"
    SCHEDULE = "schedule"


class SyncCycle(BaseModel):
    """Outcome of one fetch-reconcile-apply attempt. Never persisted."""

    model_config = ConfigDict(frozen=True)

    trigger: SyncTrigger
    started_at: datetime
    finished_at: datetime
    roster_size: int | None = None
    applied: bool = False
    error: str | None = None

    @property
    def duration(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


class SyncEngine:
    """Keeps a :class:`LocalStore` in step with a :class:`RemoteDataSource`.

    Construction does no I/O. Call :meth:`start` to launch the startup
    sync (and optional periodic syncs), :meth:`sync_now` for on-demand
    refreshes, and :meth:`stop` when the owning context goes away.

    Usage::

        engine = SyncEngine(api, store)
        engine.start()
        ...
        await engine.sync_now()
        ...
        await engine.stop()
    """

    def __init__(
        self,
        remote: RemoteDataSource,
        store: LocalStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._remote = remote
        self._store = store
        self._clock = clock
        self._state = SyncState.IDLE
        self._inflight: asyncio.Task[SyncCycle] | None = None
        self._runner: asyncio.Task[None] | None = None
        self._last_cycle: SyncCycle | None = None
        self._last_error: Exception | None = None

    async def __aenter__(self) -> SyncEngine:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def last_cycle(self) -> SyncCycle | None:
        """Most recently finished attempt, successful or not."""
        return self._last_cycle

    @property
    def last_error(self) -> Exception | None:
        """Error of the most recent attempt, ``None`` after a success."""
        return self._last_error

    @property
    def is_running(self) -> bool:
        """Whether the background schedule task is alive."""
        return self._runner is not None and not self._runner.done()

    @property
    def is_syncing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, schedule: SyncSchedule | None = None) -> asyncio.Task[None]:
        """Launch the background sync task. Must be called from a running loop.

        The task syncs once immediately; with ``schedule.interval`` set it
        keeps syncing every interval until :meth:`stop`. Calling
        ``start`` again while the task is alive returns the same task.
        """
        if self.is_running:
            _logger.debug("Sync engine already started")
            assert self._runner is not None  # noqa: S101
            return self._runner
        effective = schedule if schedule is not None else SyncSchedule()
        self._runner = asyncio.create_task(self._run_schedule(effective), name="peopleinspace-sync-schedule")
        return self._runner

    async def stop(self) -> None:
        """Cancel the schedule and any in-flight attempt, then wait for both.

        An attempt cancelled mid-commit still finishes its transaction;
        the store is never left half written.
        """
        tasks = [t for t in (self._runner, self._inflight) if t is not None and not t.done()]
        self._runner = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            _logger.debug("Sync engine stopped")

    async def _run_schedule(self, schedule: SyncSchedule) -> None:
        failures = 0
        trigger = SyncTrigger.STARTUP
        while True:
            if await self._sync_and_log(trigger):
                failures = 0
            else:
                failures += 1
            delay = schedule.next_delay(failures)
            if delay is None:
                return
            _logger.debug("Next sync in %.1fs (consecutive failures=%d)", delay, failures)
            await asyncio.sleep(delay)
            trigger = SyncTrigger.SCHEDULE

    async def _sync_and_log(self, trigger: SyncTrigger) -> bool:
        try:
            await self.sync_now(trigger)
        except SyncError as exc:
            _logger.warning("%s sync failed: %s", trigger, exc)
            return False
        except StorageError:
            _logger.error("%s sync could not write to the local store", trigger, exc_info=True)
            return False
        except Exception:
            # Keep the schedule alive; the failure must still be visible.
            _logger.exception("%s sync failed unexpectedly", trigger)
            return False
        return True

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def sync_now(self, trigger: SyncTrigger = SyncTrigger.MANUAL) -> SyncCycle:
        """Fetch the roster and replace the store contents with it.

        Joins the in-flight attempt if there is one.

        Returns
        -------
        SyncCycle
            The applied cycle.

        Raises
        ------
        SyncError
            The fetch failed (``cause`` is the NetworkError/DecodeError);
            the store was not touched.
        StorageError
            The fetch succeeded but the commit failed.
        """
        task = self._inflight
        if task is None or task.done():
            task = asyncio.create_task(self._run_cycle(trigger), name="peopleinspace-sync")
            task.add_done_callback(self._on_cycle_done)
            self._inflight = task
        else:
            _logger.debug("Sync already in flight; joining it (trigger=%s)", trigger)
        # Shielded so one caller giving up does not cancel the attempt for the others.
        return await asyncio.shield(task)

    def _on_cycle_done(self, task: asyncio.Task[SyncCycle]) -> None:
        if self._inflight is task:
            self._inflight = None
        if not task.cancelled():
            # Mark the exception retrieved; every awaiting caller already got it.
            task.exception()

    async def _run_cycle(self, trigger: SyncTrigger) -> SyncCycle:
        started_at = self._clock()
        try:
            self._set_state(SyncState.FETCHING)
            try:
                roster = await self._remote.fetch_roster()
            except (NetworkError, DecodeError) as exc:
                self._set_state(SyncState.FAILED)
                self._finish(
                    SyncCycle(trigger=trigger, started_at=started_at, finished_at=self._clock(), error=str(exc)),
                    exc,
                )
                raise SyncError(f"Roster fetch failed: {exc}", cause=exc) from exc

            self._set_state(SyncState.APPLYING)
            try:
                await self._store.replace_all(roster.people)
            except StorageError as exc:
                self._set_state(SyncState.FAILED)
                self._finish(
                    SyncCycle(
                        trigger=trigger,
                        started_at=started_at,
                        finished_at=self._clock(),
                        roster_size=len(roster.people),
                        error=str(exc),
                    ),
                    exc,
                )
                raise

            cycle = SyncCycle(
                trigger=trigger,
                started_at=started_at,
                finished_at=self._clock(),
                roster_size=len(roster.people),
                applied=True,
            )
            self._finish(cycle, None)
            _logger.debug("Sync applied %d assignment(s) (trigger=%s)", len(roster.people), trigger)
            return cycle
        finally:
            self._set_state(SyncState.IDLE)

    def _set_state(self, state: SyncState) -> None:
        if state != self._state:
            _logger.debug("Sync state %s -> %s", self._state, state)
            self._state = state

    def _finish(self, cycle: SyncCycle, error: Exception | None) -> None:
        self._last_cycle = cycle
        self._last_error = error

    # ------------------------------------------------------------------
    # Position
    # ------------------------------------------------------------------

    async def fetch_position_once(self) -> IssPosition:
        """Read the ISS position straight from the remote source.

        Not cached and never touches the store; NetworkError and
        DecodeError propagate unchanged.
        """
        return await self._remote.fetch_position()
