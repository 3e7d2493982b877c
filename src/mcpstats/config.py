"""Client configuration for mcpstats."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from mcpstats._constants import (
    BASE_URL,
    CACHE_MAX_AGE,
    FEED_PATH,
    MAX_ATTEMPTS,
    MAX_POINTS,
    REQUEST_TIMEOUT,
    RETRY_DELAYS,
)
from mcpstats.exceptions import AnalyticsConfigError


def _env_delays(value: str) -> tuple[float, ...]:
    parts = [part.strip() for part in value.split(",")]
    try:
        return tuple(float(part) for part in parts if part)
    except ValueError as exc:
        raise AnalyticsConfigError(f"MCPSTATS_RETRY_DELAYS must be comma-separated seconds, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class AnalyticsConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Origin serving the analytics feed.
    feed_path : str
        Path of the JSON snapshot array below ``base_url``.
    request_timeout : float
        Deadline in seconds for a single fetch attempt.
    max_attempts : int
        Total number of attempts before giving up.
    retry_delays : tuple of float
        Backoff in seconds after failed attempt 1, 2, ...  No delay
        follows the final attempt.  When there are fewer delays than
        gaps between attempts, the last delay is reused.
    cache_max_age : float
        Age in seconds after which cached data is reported as stale.
        Stale data is never deleted.
    cache_path : str or None
        File backing the persistent cache.  ``None`` keeps the cache in
        memory for the lifetime of the client.
    max_points : int
        Point budget for chart series (see :func:`mcpstats.aggregation.decimate`).
    """

    base_url: str = BASE_URL
    feed_path: str = FEED_PATH
    request_timeout: float = REQUEST_TIMEOUT
    max_attempts: int = MAX_ATTEMPTS
    retry_delays: tuple[float, ...] = RETRY_DELAYS
    cache_max_age: float = CACHE_MAX_AGE
    cache_path: str | None = None
    max_points: int = MAX_POINTS

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise AnalyticsConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.max_attempts < 1:
            raise AnalyticsConfigError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if any(delay < 0 for delay in self.retry_delays):
            raise AnalyticsConfigError(f"retry_delays must not be negative, got {self.retry_delays}")
        if self.cache_max_age < 0:
            raise AnalyticsConfigError(f"cache_max_age must not be negative, got {self.cache_max_age}")
        if self.max_points < 1:
            raise AnalyticsConfigError(f"max_points must be at least 1, got {self.max_points}")

    @property
    def feed_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.feed_path.lstrip('/')}"

    def retry_delay(self, attempt: int) -> float:
        """Backoff in seconds after failed *attempt* (1-based)."""
        if not self.retry_delays:
            return 0.0
        index = min(attempt - 1, len(self.retry_delays) - 1)
        return self.retry_delays[index]

    @classmethod
    def from_env(cls, **overrides: Any) -> AnalyticsConfig:
        """Create configuration from environment variables.

        Reads the optional ``MCPSTATS_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        AnalyticsConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "MCPSTATS_BASE_URL": ("base_url", str),
            "MCPSTATS_FEED_PATH": ("feed_path", str),
            "MCPSTATS_REQUEST_TIMEOUT": ("request_timeout", float),
            "MCPSTATS_MAX_ATTEMPTS": ("max_attempts", int),
            "MCPSTATS_RETRY_DELAYS": ("retry_delays", _env_delays),
            "MCPSTATS_CACHE_MAX_AGE": ("cache_max_age", float),
            "MCPSTATS_CACHE_PATH": ("cache_path", str),
            "MCPSTATS_MAX_POINTS": ("max_points", int),
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, (field_name, convert) in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = convert(val)
            except ValueError as exc:
                raise AnalyticsConfigError(f"Invalid value for {env_key}: {val!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
