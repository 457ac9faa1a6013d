"""HTTP transport for the Everywhere Hub API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyeverywhere._constants import USER_AGENT
from pyeverywhere._redact import redact_params
from pyeverywhere.config import EverywhereConfig
from pyeverywhere.exceptions import EverywhereTransportError

_logger = logging.getLogger(__name__)


def _preview(body: bytes, limit: int = 200) -> str:
    return body[:limit].decode("utf-8", errors="replace")


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str]) -> Any: ...


class HttpTransport:
    """One-shot JSON GET requests against the configured base URL."""

    def __init__(self, config: EverywhereConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str, params: Mapping[str, str]) -> Any:
        """GET *endpoint* and return the decoded JSON body.

        Raises :class:`EverywhereTransportError` on network errors, timeouts,
        non-2xx statuses and bodies that are not UTF-8 JSON.
        """
        url = f"{self._config.base_url}{endpoint}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s params=%s", url, redact_params(params))

        try:
            async with self._http.get(url, params=dict(params), headers=headers, timeout=self._timeout) as resp:
                body = await resp.read()
                if not 200 <= resp.status < 300:
                    raise EverywhereTransportError(
                        f"HTTP {resp.status} from {endpoint}: {_preview(body)}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except EverywhereTransportError:
            raise
        except TimeoutError as exc:
            raise EverywhereTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise EverywhereTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise EverywhereTransportError(
                f"Invalid JSON from {endpoint}: {_preview(body)}",
                status_code=resp.status,
                endpoint=endpoint,
            ) from exc
