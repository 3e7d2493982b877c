"""High-level async client for the MCP registry analytics feed."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any, TypeVar

import aiohttp

from mcpstats._transport import HttpTransport, Transport
from mcpstats.cache import JsonFileStorage, KeyValueStorage, MemoryStorage, SnapshotCache
from mcpstats.cancellation import CancelToken
from mcpstats.config import AnalyticsConfig
from mcpstats.exceptions import (
    AnalyticsError,
    FetchCancelledError,
    FetchError,
    FetchTimeoutError,
    InvalidResponseError,
    StaleDataError,
    UnreachableError,
)
from mcpstats.models.preferences import CacheStaleness
from mcpstats.models.snapshot import Snapshot, parse_snapshots
from mcpstats.theme import ThemeStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class FetchState(StrEnum):
    """Lifecycle of a single :meth:`AnalyticsClient.fetch_analytics` call."""

    IDLE = "idle"
    REQUESTING = "requesting"
    RETRYING = "retrying"
    SUCCESS = "success"
    FAILED = "failed"


def _consume_result(task: asyncio.Future[Any]) -> None:
    # Abandoned attempts may still finish later; keep asyncio from
    # reporting their outcome as never retrieved.
    if not task.cancelled():
        task.exception()


class AnalyticsClient:
    """Async client for the analytics feed.

    Usage::

        async with AnalyticsClient(config) as client:
            snapshots = await client.fetch_analytics()

    Token-less calls to :meth:`fetch_analytics` supersede each other: a
    new call cancels the previous one if it is still running.  Calls
    made with a caller-owned :class:`CancelToken` are independent.
    """

    def __init__(
        self,
        config: AnalyticsConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        storage: KeyValueStorage | None = None,
        cache: SnapshotCache | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_state: Callable[[FetchState], None] | None = None,
    ) -> None:
        self._config = config or AnalyticsConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        if storage is None:
            if self._config.cache_path:
                storage = JsonFileStorage(self._config.cache_path)
            else:
                storage = MemoryStorage()
        self._storage = storage
        self._cache = cache or SnapshotCache(storage, max_age=self._config.cache_max_age)
        self._sleep = sleep
        self._on_state = on_state
        self._current_token: CancelToken | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> AnalyticsClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Cancel any in-flight default fetch and release the HTTP session."""
        self.cancel_fetch()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> AnalyticsConfig:
        return self._config

    @property
    def cache(self) -> SnapshotCache:
        return self._cache

    @property
    def theme(self) -> ThemeStore:
        """Theme preference stored alongside the feed cache."""
        return ThemeStore(self._storage)

    def get_cache_staleness(self) -> CacheStaleness | None:
        return self._cache.staleness_info()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise AnalyticsError("Client not initialized. Use 'async with AnalyticsClient(...) as client:'")
        return self._transport

    def _emit(self, state: FetchState) -> None:
        if self._on_state is None:
            return
        try:
            self._on_state(state)
        except Exception:
            _logger.debug("on_state callback failed", exc_info=True)

    async def _run_cancellable(
        self,
        awaitable: Awaitable[T],
        token: CancelToken,
        *,
        timeout: float | None = None,
    ) -> T:
        """Await *awaitable* unless *token* fires or *timeout* elapses first.

        The losing task is cancelled but not awaited, so a transport that
        ignores cancellation cannot hold the caller past its deadline.
        """
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        except BaseException:
            task.cancel()
            task.add_done_callback(_consume_result)
            raise
        finally:
            waiter.cancel()

        if token.cancelled or task not in done:
            task.cancel()
            task.add_done_callback(_consume_result)
            if token.cancelled:
                raise FetchCancelledError("Request was cancelled")
            raise FetchTimeoutError(f"Request timed out after {timeout}s", timeout=timeout or 0.0)
        return task.result()

    async def _attempt(self, transport: Transport, token: CancelToken) -> list[Snapshot]:
        url = self._config.feed_url
        payload = await self._run_cancellable(
            transport.fetch_feed(url),
            token,
            timeout=self._config.request_timeout,
        )
        try:
            return parse_snapshots(payload)
        except ValueError as exc:
            raise InvalidResponseError(f"Invalid analytics data format: {exc}", url=url) from exc

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def cancel_fetch(self) -> None:
        """Cancel the in-flight token-less fetch, if any."""
        token = self._current_token
        self._current_token = None
        if token is not None and not token.cancelled:
            token.cancel()

    async def fetch_analytics(
        self,
        cancel_token: CancelToken | None = None,
        *,
        allow_stale: bool = False,
    ) -> list[Snapshot]:
        """Fetch the snapshot feed with timeout, retry and cache fallback.

        Parameters
        ----------
        cancel_token
            Caller-owned cancellation.  Without one, this call cancels the
            previous token-less call that is still running.
        allow_stale
            Return cached data instead of raising :class:`StaleDataError`
            when every attempt fails.

        Raises
        ------
        FetchCancelledError
            Cancelled via the token or superseded by a newer call.
        StaleDataError
            Every attempt failed; carries the cached feed and its capture time.
        UnreachableError
            Every attempt failed and nothing is cached.
        """
        transport = self._require_transport()
        owned = cancel_token is None
        if cancel_token is None:
            self.cancel_fetch()
            token = CancelToken()
            self._current_token = token
        else:
            token = cancel_token

        self._emit(FetchState.IDLE)
        try:
            return await self._fetch_with_retry(transport, token, allow_stale=allow_stale)
        finally:
            if owned and self._current_token is token:
                self._current_token = None

    async def _fetch_with_retry(
        self,
        transport: Transport,
        token: CancelToken,
        *,
        allow_stale: bool,
    ) -> list[Snapshot]:
        max_attempts = self._config.max_attempts
        last_error: FetchError | None = None

        try:
            for attempt in range(1, max_attempts + 1):
                if token.cancelled:
                    raise FetchCancelledError("Request was cancelled")
                self._emit(FetchState.REQUESTING)
                try:
                    snapshots = await self._attempt(transport, token)
                except FetchError as exc:
                    if not exc.retryable:
                        raise
                    last_error = exc
                    _logger.debug("Analytics fetch attempt %d/%d failed: %s", attempt, max_attempts, exc)
                else:
                    self._cache.write(snapshots)
                    self._emit(FetchState.SUCCESS)
                    return snapshots

                if attempt < max_attempts:
                    self._emit(FetchState.RETRYING)
                    delay = self._config.retry_delay(attempt)
                    if delay > 0:
                        _logger.debug("Retrying analytics fetch in %.1fs", delay)
                        await self._run_cancellable(self._sleep(delay), token)
        except FetchCancelledError:
            _logger.debug("Analytics fetch cancelled")
            self._emit(FetchState.FAILED)
            raise
        except FetchError as exc:
            _logger.debug("Analytics fetch aborted on non-retryable %s error", exc.kind)
            self._emit(FetchState.FAILED)
            raise

        self._emit(FetchState.FAILED)
        return self._fallback_to_cache(max_attempts, last_error, allow_stale=allow_stale)

    def _fallback_to_cache(
        self,
        attempts: int,
        last_error: FetchError | None,
        *,
        allow_stale: bool,
    ) -> list[Snapshot]:
        cached = self._cache.read_stale()
        if cached is None:
            _logger.warning("Analytics feed unreachable after %d attempts; no cached data", attempts)
            raise UnreachableError(
                "Unable to connect to analytics service. Please try again later.",
                attempts=attempts,
            ) from last_error

        cached_at = self._cache.read_timestamp()
        when = cached_at.isoformat() if cached_at is not None else "unknown time"
        message = f"Unable to fetch latest analytics. Showing cached data from {when}."
        _logger.warning(message)
        if allow_stale:
            return cached
        raise StaleDataError(message, cached_data=cached, cached_at=cached_at) from last_error
