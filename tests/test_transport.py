from __future__ import annotations

from typing import Any

import aiohttp
import pytest

from peopleinspace._transport import HttpTransport
from peopleinspace.config import PeopleInSpaceConfig
from peopleinspace.exceptions import DecodeError, NetworkError, SyncError
from peopleinspace.remote import PeopleInSpaceApi
from peopleinspace.store import MemoryStore
from peopleinspace.sync import SyncEngine


class _FakeResponse:
    def __init__(self, status: int, body: str | bytes) -> None:
        self.status = status
        self._body = body.encode("utf-8") if isinstance(body, str) else body

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: BaseException | None = None) -> None:
        self._response = response
        self._error = error
        self.requests: list[tuple[str, dict[str, str]]] = []

    def get(self, url: str, *, headers: dict[str, str], timeout: aiohttp.ClientTimeout) -> _FakeResponse:
        self.requests.append((url, headers))
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


def _transport(session: _FakeSession) -> HttpTransport:
    config = PeopleInSpaceConfig(base_url="http://example.test")
    return HttpTransport(config, session)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_get_json_returns_object_and_builds_url() -> None:
    session = _FakeSession(_FakeResponse(200, '{"people": []}'))

    body = await _transport(session).get_json("/astros.json")

    assert body == {"people": []}
    url, headers = session.requests[0]
    assert url == "http://example.test/astros.json"
    assert headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_non_2xx_raises_network_error_with_status() -> None:
    session = _FakeSession(_FakeResponse(503, "Service Unavailable"))

    with pytest.raises(NetworkError) as exc_info:
        await _transport(session).get_json("/astros.json")

    assert exc_info.value.status_code == 503
    assert exc_info.value.endpoint == "/astros.json"


@pytest.mark.asyncio
async def test_connection_failure_raises_network_error() -> None:
    session = _FakeSession(error=aiohttp.ClientConnectionError("connection refused"))

    with pytest.raises(NetworkError) as exc_info:
        await _transport(session).get_json("/iss-now.json")

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)


@pytest.mark.asyncio
async def test_timeout_raises_network_error() -> None:
    session = _FakeSession(error=TimeoutError())

    with pytest.raises(NetworkError, match="timed out"):
        await _transport(session).get_json("/iss-now.json")


@pytest.mark.asyncio
async def test_invalid_json_raises_decode_error() -> None:
    session = _FakeSession(_FakeResponse(200, "<html>maintenance</html>"))

    with pytest.raises(DecodeError) as exc_info:
        await _transport(session).get_json("/astros.json")

    assert exc_info.value.endpoint == "/astros.json"


@pytest.mark.asyncio
async def test_non_object_body_raises_decode_error() -> None:
    session = _FakeSession(_FakeResponse(200, "[1, 2, 3]"))

    with pytest.raises(DecodeError, match="JSON object"):
        await _transport(session).get_json("/astros.json")


@pytest.mark.asyncio
async def test_invalid_utf8_body_raises_decode_error() -> None:
    session = _FakeSession(_FakeResponse(200, b"\xff\xfe"))

    with pytest.raises(DecodeError, match="UTF-8") as exc_info:
        await _transport(session).get_json("/astros.json")

    assert exc_info.value.endpoint == "/astros.json"
    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_invalid_utf8_inside_json_string_raises_decode_error() -> None:
    session = _FakeSession(_FakeResponse(200, b'{"people": [{"name": "\xff\xfe", "craft": "ISS"}]}'))

    with pytest.raises(DecodeError):
        await _transport(session).get_json("/astros.json")


@pytest.mark.asyncio
async def test_sync_over_invalid_utf8_body_is_sync_error() -> None:
    session = _FakeSession(_FakeResponse(200, b'{"people": [{"name": "\xff\xfe", "craft": "ISS"}]}'))
    store = await MemoryStore().initialize()
    engine = SyncEngine(PeopleInSpaceApi(_transport(session)), store)

    with pytest.raises(SyncError) as exc_info:
        await engine.sync_now()

    assert isinstance(exc_info.value.cause, DecodeError)
    assert engine.last_cycle is not None
    assert engine.last_cycle.applied is False
    assert await store.select_all() == []
