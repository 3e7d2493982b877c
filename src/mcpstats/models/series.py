"""Aggregated, chart-ready time-series points."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field, PositiveInt, model_validator

from mcpstats.models._base import AnalyticsBaseModel, Count, UtcTimestamp


class Granularity(StrEnum):
    """Bucket width used when aggregating snapshots."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class SeriesFilter(StrEnum):
    """Which server-type lines a chart should draw."""

    ALL = "all"
    SHOW_ALL = "show-all"
    LOCAL = "local"
    REMOTE = "remote"


class TimeSeriesPoint(AnalyticsBaseModel):
    """Representative counts for one time bucket.

    ``period_start`` and ``period_end`` are inclusive UTC bounds.  The
    counts are copied from a single snapshot in the bucket, not averaged.
    """

    period_start: UtcTimestamp
    period_end: UtcTimestamp
    granularity: Granularity
    local_count: Count
    remote_count: Count
    total_count: Count
    both_count: Count = 0
    unknown_count: Count = 0
    snapshot_count: PositiveInt = Field(default=1)

    @model_validator(mode="after")
    def _check_period(self) -> TimeSeriesPoint:
        if self.period_start > self.period_end:
            raise ValueError("period_start must not be after period_end")
        return self
