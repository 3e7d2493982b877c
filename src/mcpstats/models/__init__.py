"""Data models for the analytics feed and derived series."""

from mcpstats.models._base import AnalyticsBaseModel, UtcTimestamp, format_utc_timestamp, parse_utc_timestamp
from mcpstats.models.preferences import CacheStaleness, ThemePreference
from mcpstats.models.series import Granularity, SeriesFilter, TimeSeriesPoint
from mcpstats.models.snapshot import ServerType, Snapshot, dump_snapshots, parse_snapshots

__all__ = [
    "AnalyticsBaseModel",
    "CacheStaleness",
    "Granularity",
    "SeriesFilter",
    "ServerType",
    "Snapshot",
    "ThemePreference",
    "TimeSeriesPoint",
    "UtcTimestamp",
    "dump_snapshots",
    "format_utc_timestamp",
    "parse_snapshots",
    "parse_utc_timestamp",
]
