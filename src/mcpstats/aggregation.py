"""Snapshot bucketing and series decimation.

All period boundaries are computed from UTC fields only, so bucket
edges do not depend on the time zone of the host running the code.
"""

from __future__ import annotations

import calendar
import math
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from mcpstats._constants import INDIVIDUAL_SNAPSHOT_THRESHOLD, MAX_POINTS
from mcpstats.models.series import Granularity, TimeSeriesPoint
from mcpstats.models.snapshot import Snapshot

# Inclusive period ends stop one millisecond short of the next period.
_LAST_MS = timedelta(milliseconds=1)


def period_start(timestamp: datetime, granularity: Granularity | str) -> datetime:
    """Round *timestamp* down to the start of its UTC hour/day/week/month.

    Weeks start on Monday.
    """
    granularity = Granularity(granularity)
    ts = timestamp.astimezone(UTC)
    if granularity is Granularity.HOURLY:
        return ts.replace(minute=0, second=0, microsecond=0)
    day = ts.replace(hour=0, minute=0, second=0, microsecond=0)
    if granularity is Granularity.DAILY:
        return day
    if granularity is Granularity.WEEKLY:
        return day - timedelta(days=day.weekday())
    return day.replace(day=1)


def period_end(timestamp: datetime, granularity: Granularity | str) -> datetime:
    """Last millisecond of the UTC period containing *timestamp*."""
    granularity = Granularity(granularity)
    start = period_start(timestamp, granularity)
    if granularity is Granularity.HOURLY:
        next_start = start + timedelta(hours=1)
    elif granularity is Granularity.DAILY:
        next_start = start + timedelta(days=1)
    elif granularity is Granularity.WEEKLY:
        next_start = start + timedelta(weeks=1)
    else:
        days_in_month = calendar.monthrange(start.year, start.month)[1]
        next_start = start + timedelta(days=days_in_month)
    return next_start - _LAST_MS


def aggregate_by_granularity(
    snapshots: Sequence[Snapshot],
    granularity: Granularity | str,
) -> list[TimeSeriesPoint]:
    """Group snapshots into time buckets and pick one representative per bucket.

    With hourly granularity and fewer than ten snapshots every snapshot
    becomes its own zero-width bucket, so sparse data is not collapsed
    into a single hour.

    The counts of a bucket come from the *last snapshot in input order*
    that fell into it, so callers should pass snapshots chronologically.
    Buckets are returned sorted by ``period_start``.
    """
    granularity = Granularity(granularity)
    if not snapshots:
        return []

    individual = granularity is Granularity.HOURLY and len(snapshots) < INDIVIDUAL_SNAPSHOT_THRESHOLD

    grouped: dict[datetime, list[Snapshot]] = {}
    for snapshot in snapshots:
        key = snapshot.timestamp if individual else period_start(snapshot.timestamp, granularity)
        grouped.setdefault(key, []).append(snapshot)

    points: list[TimeSeriesPoint] = []
    for key, members in grouped.items():
        if individual:
            start = end = key
        else:
            start = key
            end = period_end(key, granularity)
        latest = members[-1]
        points.append(
            TimeSeriesPoint(
                period_start=start,
                period_end=end,
                granularity=granularity,
                local_count=latest.local_count,
                remote_count=latest.remote_count,
                total_count=latest.total_count,
                both_count=latest.both_count,
                unknown_count=latest.unknown_count,
                snapshot_count=len(members),
            )
        )

    points.sort(key=lambda point: point.period_start)
    return points


def decimate(points: Sequence[TimeSeriesPoint], max_points: int = MAX_POINTS) -> list[TimeSeriesPoint]:
    """Downsample *points* with a uniform stride, always keeping the last one.

    The result may hold ``max_points + 1`` items when the stride skips the
    final point and it has to be appended.
    """
    if max_points < 1:
        raise ValueError(f"max_points must be at least 1, got {max_points}")
    if len(points) <= max_points:
        return list(points)

    step = math.ceil(len(points) / max_points)
    result = list(points[::step])
    if result[-1] is not points[-1]:
        result.append(points[-1])
    return result
