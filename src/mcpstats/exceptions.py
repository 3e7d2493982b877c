"""Custom exception hierarchy for mcpstats."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcpstats.models.snapshot import Snapshot


class FetchErrorKind(StrEnum):
    """Machine-readable category of a :class:`FetchError`."""

    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    INVALID_RESPONSE = "invalid_response"
    TRANSPORT = "transport"
    UNREACHABLE = "unreachable"
    STALE_DATA = "stale_data"


class AnalyticsError(Exception):
    """Base exception for all mcpstats errors."""


class AnalyticsConfigError(AnalyticsError):
    """Invalid or missing configuration."""


class FetchError(AnalyticsError):
    """Base for failures raised while fetching the analytics feed.

    Callers should branch on :attr:`kind` (or the concrete subclass),
    never on the message text.
    """

    kind: FetchErrorKind

    @property
    def retryable(self) -> bool:
        """Whether the orchestrator may spend another attempt after this error."""
        return self.kind in (
            FetchErrorKind.TIMEOUT,
            FetchErrorKind.INVALID_RESPONSE,
            FetchErrorKind.TRANSPORT,
        )


class FetchCancelledError(FetchError):
    """The fetch was cancelled by its caller or superseded by a newer fetch.

    This is an expected condition during rapid re-invocation; UI callers
    usually ignore it silently.
    """

    kind = FetchErrorKind.CANCELLED


class FetchTimeoutError(FetchError):
    """A single attempt exceeded the per-attempt deadline."""

    kind = FetchErrorKind.TIMEOUT

    def __init__(self, message: str, *, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(message)


class InvalidResponseError(FetchError):
    """Non-success HTTP status or a payload that failed structural validation."""

    kind = FetchErrorKind.INVALID_RESPONSE

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class FeedTransportError(FetchError):
    """Network-level failure (connection refused, DNS, reset...)."""

    kind = FetchErrorKind.TRANSPORT

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class UnreachableError(FetchError):
    """All attempts failed and there is no cached data to fall back on."""

    kind = FetchErrorKind.UNREACHABLE

    def __init__(self, message: str, *, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(message)


class StaleDataError(FetchError):
    """All attempts failed but a previously cached feed is available.

    Not a hard failure: callers may display :attr:`cached_data` together
    with a warning mentioning :attr:`cached_at`.
    """

    kind = FetchErrorKind.STALE_DATA

    def __init__(
        self,
        message: str,
        *,
        cached_data: Sequence[Snapshot],
        cached_at: datetime | None,
    ) -> None:
        self.cached_data: list[Snapshot] = list(cached_data)
        self.cached_at = cached_at
        super().__init__(message)
