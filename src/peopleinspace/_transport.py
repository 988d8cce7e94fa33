"""HTTP transport for the Open Notify JSON API."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from peopleinspace._constants import USER_AGENT
from peopleinspace.config import PeopleInSpaceConfig
from peopleinspace.exceptions import DecodeError, NetworkError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> dict[str, Any]:
        ...


class HttpTransport:
    """aiohttp transport mapping failures onto NetworkError / DecodeError."""

    def __init__(
        self,
        config: PeopleInSpaceConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str) -> dict[str, Any]:
        """GET *endpoint* and return the decoded JSON object.

        Raises
        ------
        NetworkError
            Connection failure, timeout, or a non-2xx status.
        DecodeError
            The body is not JSON or not a JSON object.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        url = f"{self._config.base_url}{endpoint}"

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                payload = await resp.read()
                if not 200 <= resp.status < 300:
                    raise NetworkError(
                        f"HTTP {resp.status} from {endpoint}: {payload[:200].decode('utf-8', errors='replace')}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except NetworkError:
            raise
        except TimeoutError as exc:
            raise NetworkError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise NetworkError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(payload.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise DecodeError(
                f"Response from {endpoint} is not valid UTF-8: {exc}",
                endpoint=endpoint,
            ) from exc
        except json.JSONDecodeError as exc:
            raise DecodeError(
                f"Invalid JSON from {endpoint}: {payload[:200].decode('utf-8', errors='replace')}",
                endpoint=endpoint,
            ) from exc

        if not isinstance(body, dict):
            raise DecodeError(
                f"Expected a JSON object from {endpoint}, got {type(body).__name__}",
                endpoint=endpoint,
            )

        return body
