"""Crew roster endpoint.

Endpoint:
  - /astros.json
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from peopleinspace._constants import PEOPLE_ENDPOINT
from peopleinspace._transport import Transport
from peopleinspace.exceptions import DecodeError
from peopleinspace.models.assignment import Roster

_logger = logging.getLogger(__name__)


def parse_roster(data: dict[str, Any], *, endpoint: str = PEOPLE_ENDPOINT) -> Roster:
    """Validate a raw ``/astros.json`` body into a :class:`Roster`."""
    try:
        roster = Roster.model_validate(data)
    except ValidationError as exc:
        raise DecodeError(
            f"Unexpected roster payload from {endpoint}: {exc.error_count()} validation error(s)",
            endpoint=endpoint,
        ) from exc

    if roster.number is not None and roster.number != len(roster.people):
        # The count is informational; the list is authoritative.
        _logger.debug(
            "Roster count mismatch: number=%d people=%d",
            roster.number,
            len(roster.people),
        )
    return roster


async def fetch_roster(transport: Transport) -> Roster:
    """Fetch and decode the current crew roster."""
    data = await transport.get_json(PEOPLE_ENDPOINT)
    return parse_roster(data)
