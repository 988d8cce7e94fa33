"""High-level async client: wiring plus a repository facade."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from peopleinspace._transport import HttpTransport
from peopleinspace.config import PeopleInSpaceConfig, SyncSchedule
from peopleinspace.exceptions import PeopleInSpaceError
from peopleinspace.live import Subscription
from peopleinspace.models import Assignment, IssPosition
from peopleinspace.remote import PeopleInSpaceApi, RemoteDataSource
from peopleinspace.store import LocalStore, SqliteStore
from peopleinspace.sync import SyncCycle, SyncEngine, SyncTrigger

_logger = logging.getLogger(__name__)


class PeopleInSpaceClient:
    """Async client for the people-in-space roster and ISS position.

    Entering the context opens the HTTP session and the local store; no
    sync runs until :meth:`start` or :meth:`refresh` is called.

    Usage::

        async with PeopleInSpaceClient(config) as client:
            client.start()
            async with client.people() as snapshots:
                async for people in snapshots:
                    ...
    """

    def __init__(
        self,
        config: PeopleInSpaceConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        store: LocalStore | None = None,
        remote: RemoteDataSource | None = None,
    ) -> None:
        self._config = config if config is not None else PeopleInSpaceConfig()
        self._external_session = session is not None
        self._http_session = session
        self._store: LocalStore = store if store is not None else SqliteStore(self._config.database_path)
        self._remote = remote
        self._engine: SyncEngine | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PeopleInSpaceClient:
        if self._remote is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._remote = PeopleInSpaceApi(HttpTransport(self._config, self._http_session))
        try:
            await self._store.initialize()
        except BaseException:
            await self._close_http()
            raise
        self._engine = SyncEngine(self._remote, self._store)
        _logger.debug("Client ready (store=%s)", type(self._store).__name__)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        engine = self._engine
        self._engine = None
        try:
            if engine is not None:
                await engine.stop()
            await self._store.close()
        finally:
            await self._close_http()

    async def _close_http(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_engine(self) -> SyncEngine:
        if self._engine is None:
            raise PeopleInSpaceError("Client not initialized. Use 'async with PeopleInSpaceClient(...) as client:'")
        return self._engine

    def _require_remote(self) -> RemoteDataSource:
        if self._remote is None:
            raise PeopleInSpaceError("Client not initialized. Use 'async with PeopleInSpaceClient(...) as client:'")
        return self._remote

    @property
    def config(self) -> PeopleInSpaceConfig:
        return self._config

    @property
    def engine(self) -> SyncEngine:
        return self._require_engine()

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def start(self, schedule: SyncSchedule | None = None) -> None:
        """Start background syncing (config schedule unless one is given)."""
        effective = schedule if schedule is not None else self._config.schedule()
        self._require_engine().start(effective)

    async def refresh(self) -> SyncCycle:
        """On-demand sync, e.g. pull-to-refresh."""
        return await self._require_engine().sync_now(SyncTrigger.MANUAL)

    # ------------------------------------------------------------------
    # Cached roster
    # ------------------------------------------------------------------

    def people(self) -> Subscription[list[Assignment]]:
        """Live view of the cached roster."""
        return self._store.observe_all()

    async def cached_people(self) -> list[Assignment]:
        return await self._store.select_all()

    # ------------------------------------------------------------------
    # Uncached passthroughs
    # ------------------------------------------------------------------

    async def fetch_people(self) -> list[Assignment]:
        """Roster straight from the API, bypassing and not updating the cache."""
        roster = await self._require_remote().fetch_roster()
        return list(roster.people)

    async def fetch_iss_position(self) -> IssPosition:
        return await self._require_engine().fetch_position_once()
