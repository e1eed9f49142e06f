"""HTTP transport for the alert-delivery endpoint."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from shecurity._constants import USER_AGENT
from shecurity._redact import redact_for_log
from shecurity.exceptions import DispatchTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the dispatcher.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`JsonTransport`) concrete.
    """

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        ...


class JsonTransport:
    """POST JSON bodies and decode JSON object replies."""

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = 15.0,
    ) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Send *payload* and return the decoded response object.

        Raises
        ------
        DispatchTransportError
            On network failure, non-2xx status, or a body that is not a
            JSON object.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        body = json.dumps(dict(payload), separators=(",", ":"))

        _logger.debug("POST %s %s", url, redact_for_log(payload))

        try:
            async with self._http.post(url, data=body, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise DispatchTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except DispatchTransportError:
            raise
        except TimeoutError as exc:
            raise DispatchTransportError(f"Request to {url} timed out", url=url) from exc
        except aiohttp.ClientError as exc:
            raise DispatchTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DispatchTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                status_code=resp.status,
                url=url,
            ) from exc

        if not isinstance(result, dict):
            raise DispatchTransportError(
                f"Expected a JSON object from {url}, got {type(result).__name__}",
                status_code=resp.status,
                url=url,
            )

        _logger.debug("Response %s %s", resp.status, redact_for_log(result))
        return result
