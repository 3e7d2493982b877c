"""Chart-ready series assembly and small presentation helpers."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, tzinfo

from mcpstats._constants import MAX_POINTS
from mcpstats.aggregation import aggregate_by_granularity, decimate
from mcpstats.models.series import Granularity, SeriesFilter, TimeSeriesPoint
from mcpstats.models.snapshot import Snapshot
from mcpstats.time_filter import DateBound, filter_by_time_range, filter_series_by_range, local_day

_ALL_FIELDS = ("total_count", "local_count", "remote_count", "both_count", "unknown_count")

_SERIES_FIELDS: dict[SeriesFilter, tuple[str, ...]] = {
    SeriesFilter.ALL: ("total_count",),
    SeriesFilter.SHOW_ALL: _ALL_FIELDS,
    SeriesFilter.LOCAL: ("local_count",),
    SeriesFilter.REMOTE: ("remote_count",),
}


def build_series(
    snapshots: Sequence[Snapshot],
    granularity: Granularity | str,
    *,
    start_date: DateBound = None,
    end_date: DateBound = None,
    max_points: int = MAX_POINTS,
    tz: tzinfo | None = None,
) -> list[TimeSeriesPoint]:
    """Turn raw snapshots into the points a chart should draw.

    1. drop snapshots outside the date window
    2. bucket by *granularity*
    3. decimate to *max_points*
    4. drop buckets that no longer overlap the window
    """
    in_range = filter_by_time_range(snapshots, start_date, end_date, tz=tz)
    points = aggregate_by_granularity(in_range, granularity)
    points = decimate(points, max_points)
    return filter_series_by_range(points, start_date, end_date, tz=tz)


def date_bounds(snapshots: Sequence[Snapshot], *, tz: tzinfo | None = None) -> tuple[date, date] | None:
    """First and last local calendar day covered by *snapshots*."""
    if not snapshots:
        return None
    earliest = min(snapshot.timestamp for snapshot in snapshots)
    latest = max(snapshot.timestamp for snapshot in snapshots)
    return local_day(earliest, tz), local_day(latest, tz)


def latest_total(snapshots: Sequence[Snapshot]) -> int:
    if not snapshots:
        return 0
    return snapshots[-1].total_count


def series_fields(series_filter: SeriesFilter | str) -> tuple[str, ...]:
    """Count fields drawn for a server-type selection."""
    return _SERIES_FIELDS[SeriesFilter(series_filter)]


def format_axis_label(timestamp: datetime, granularity: Granularity | str, *, tz: tzinfo | None = None) -> str:
    """Axis tick label for a bucket start, in local time."""
    local = timestamp.astimezone(tz)
    granularity = Granularity(granularity)
    if granularity is Granularity.HOURLY:
        return local.strftime("%H:%M")
    if granularity is Granularity.MONTHLY:
        return local.strftime("%b %Y")
    return f"{local.strftime('%b')} {local.day}"
