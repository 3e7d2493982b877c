"""Cooperative cancellation for feed fetches."""

from __future__ import annotations

import asyncio


class CancelToken:
    """One-shot cancellation flag that can be awaited.

    Pass a token to :meth:`mcpstats.AnalyticsClient.fetch_analytics` to
    own the request's lifetime; calling :meth:`cancel` makes the fetch
    fail with :class:`mcpstats.FetchCancelledError` at its next
    suspension point.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()
