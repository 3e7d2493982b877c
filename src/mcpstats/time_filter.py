"""Day-level date range filtering for snapshots and aggregated points.

Bounds are calendar dates compared against the *local* calendar day of
each instant (host time zone unless ``tz`` is given).  Bucketing, by
contrast, is UTC-only; see :mod:`mcpstats.aggregation`.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, tzinfo

from mcpstats.models.series import TimeSeriesPoint
from mcpstats.models.snapshot import Snapshot

DateBound = date | str | None


def _to_date(value: DateBound) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def local_day(instant: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of *instant* in *tz* (host local time when ``None``)."""
    return instant.astimezone(tz).date()


def filter_by_time_range(
    snapshots: Sequence[Snapshot],
    start_date: DateBound,
    end_date: DateBound,
    *,
    tz: tzinfo | None = None,
) -> list[Snapshot]:
    """Keep snapshots whose local day lies within ``[start_date, end_date]``.

    Either bound may be ``None``; with both unset the input is returned
    as-is (copied into a new list).
    """
    start = _to_date(start_date)
    end = _to_date(end_date)
    if start is None and end is None:
        return list(snapshots)

    result: list[Snapshot] = []
    for snapshot in snapshots:
        day = local_day(snapshot.timestamp, tz)
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        result.append(snapshot)
    return result


def filter_series_by_range(
    points: Sequence[TimeSeriesPoint],
    start_date: DateBound,
    end_date: DateBound,
    *,
    tz: tzinfo | None = None,
) -> list[TimeSeriesPoint]:
    """Keep points whose period overlaps ``[start_date, end_date]``.

    A weekly or monthly bucket that only partly overlaps the window is
    kept whole; points are never clipped.
    """
    start = _to_date(start_date)
    end = _to_date(end_date)
    if start is None and end is None:
        return list(points)

    result: list[TimeSeriesPoint] = []
    for point in points:
        if start is not None and local_day(point.period_end, tz) < start:
            continue
        if end is not None and local_day(point.period_start, tz) > end:
            continue
        result.append(point)
    return result
