"""HTTP transport for the analytics feed."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from mcpstats._constants import USER_AGENT
from mcpstats.exceptions import FeedTransportError, InvalidResponseError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can GET the feed URL and hand back decoded JSON.

    The client owns per-attempt deadlines and cancellation, so an
    implementation only has to tolerate being cancelled mid-request.
    Failures should surface as :class:`~mcpstats.exceptions.FetchError`
    subclasses so the retry loop can classify them.
    """

    async def fetch_feed(self, url: str) -> Any:
        ...


class HttpTransport:
    """Fetch and decode the JSON feed over HTTP."""

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def fetch_feed(self, url: str) -> Any:
        """GET *url* and return the decoded JSON body.

        Raises
        ------
        InvalidResponseError
            Non-2xx status or a body that is not JSON.
        FeedTransportError
            Connection-level failure.
        """
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers) as resp:
                body = await resp.read()
                if not 200 <= resp.status < 300:
                    raise InvalidResponseError(
                        f"Failed to fetch analytics: HTTP {resp.status} {resp.reason or ''}".rstrip(),
                        status_code=resp.status,
                        url=url,
                    )
        except InvalidResponseError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise FeedTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        # ValueError covers both undecodable bytes and malformed JSON.
        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as exc:
            raise InvalidResponseError(
                f"Invalid JSON from {url}: {body[:200]!r}",
                status_code=resp.status,
                url=url,
            ) from exc
