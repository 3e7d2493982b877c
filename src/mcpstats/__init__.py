"""mcpstats - Async client and time-series toolkit for MCP registry analytics."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mcpstats")
except PackageNotFoundError:
    __version__ = "0+local"
from mcpstats.aggregation import aggregate_by_granularity, decimate, period_end, period_start
from mcpstats.cache import JsonFileStorage, KeyValueStorage, MemoryStorage, SnapshotCache
from mcpstats.cancellation import CancelToken
from mcpstats.classification import classify_server, count_server_types
from mcpstats.client import AnalyticsClient, FetchState
from mcpstats.config import AnalyticsConfig
from mcpstats.exceptions import (
    AnalyticsConfigError,
    AnalyticsError,
    FeedTransportError,
    FetchCancelledError,
    FetchError,
    FetchErrorKind,
    FetchTimeoutError,
    InvalidResponseError,
    StaleDataError,
    UnreachableError,
)
from mcpstats.models import (
    CacheStaleness,
    Granularity,
    SeriesFilter,
    ServerType,
    Snapshot,
    ThemePreference,
    TimeSeriesPoint,
)
from mcpstats.series import build_series, date_bounds, format_axis_label, latest_total, series_fields
from mcpstats.theme import ThemeStore
from mcpstats.time_filter import filter_by_time_range, filter_series_by_range

__all__ = [
    "__version__",
    "AnalyticsClient",
    "AnalyticsConfig",
    "AnalyticsConfigError",
    "AnalyticsError",
    "CacheStaleness",
    "CancelToken",
    "FeedTransportError",
    "FetchCancelledError",
    "FetchError",
    "FetchErrorKind",
    "FetchState",
    "FetchTimeoutError",
    "Granularity",
    "InvalidResponseError",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SeriesFilter",
    "ServerType",
    "Snapshot",
    "SnapshotCache",
    "StaleDataError",
    "ThemePreference",
    "ThemeStore",
    "TimeSeriesPoint",
    "UnreachableError",
    "aggregate_by_granularity",
    "build_series",
    "classify_server",
    "count_server_types",
    "date_bounds",
    "decimate",
    "filter_by_time_range",
    "filter_series_by_range",
    "format_axis_label",
    "latest_total",
    "period_end",
    "period_start",
    "series_fields",
]
