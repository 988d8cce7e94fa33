"""ISS position endpoint.

Endpoint:
  - /iss-now.json
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from peopleinspace._constants import POSITION_ENDPOINT
from peopleinspace._transport import Transport
from peopleinspace.exceptions import DecodeError
from peopleinspace.models.position import IssPosition


def parse_position(data: dict[str, Any], *, endpoint: str = POSITION_ENDPOINT) -> IssPosition:
    """Validate a raw ``/iss-now.json`` body into an :class:`IssPosition`."""
    if "iss_position" not in data:
        raise DecodeError(f"Missing 'iss_position' field from {endpoint}", endpoint=endpoint)
    try:
        return IssPosition.model_validate(data)
    except ValidationError as exc:
        raise DecodeError(
            f"Unexpected position payload from {endpoint}: {exc.error_count()} validation error(s)",
            endpoint=endpoint,
        ) from exc


async def fetch_position(transport: Transport) -> IssPosition:
    """Fetch and decode the current ISS position."""
    data = await transport.get_json(POSITION_ENDPOINT)
    return parse_position(data)
