"""Remote data source: a thin contract over the Open Notify API.

No retries happen here; scheduling and backoff belong to the sync engine.
"""

from __future__ import annotations

from typing import Protocol

from peopleinspace._api import people as _people_api
from peopleinspace._api import position as _position_api
from peopleinspace._transport import Transport
from peopleinspace.models import IssPosition, Roster


class RemoteDataSource(Protocol):
    """Source of roster and position readings.

    Both methods raise :class:`~peopleinspace.exceptions.NetworkError`
    or :class:`~peopleinspace.exceptions.DecodeError`.
    """

    async def fetch_roster(self) -> Roster:
        ...

    async def fetch_position(self) -> IssPosition:
        ...


class PeopleInSpaceApi:
    """:class:`RemoteDataSource` backed by an HTTP :class:`Transport`."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def fetch_roster(self) -> Roster:
        return await _people_api.fetch_roster(self._transport)

    async def fetch_position(self) -> IssPosition:
        return await _position_api.fetch_position(self._transport)
