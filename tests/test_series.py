from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

from mcpstats.models.series import Granularity, SeriesFilter
from mcpstats.models.snapshot import Snapshot
from mcpstats.series import build_series, date_bounds, format_axis_label, latest_total, series_fields


def _snap(ts: datetime, total: int = 10) -> Snapshot:
    return Snapshot(
        timestamp=ts,
        local_count=total // 2,
        remote_count=total // 2,
        total_count=total,
        both_count=0,
        unknown_count=0,
    )


def _hourly_feed(days: int) -> list[Snapshot]:
    base = datetime(2025, 11, 1, tzinfo=UTC)
    return [_snap(base + timedelta(hours=h), total=h) for h in range(days * 24)]


class TestBuildSeries:
    def test_daily_series_inside_window(self) -> None:
        feed = _hourly_feed(10)

        points = build_series(feed, Granularity.DAILY, start_date="2025-11-03", end_date="2025-11-05", tz=UTC)

        assert [p.period_start.day for p in points] == [3, 4, 5]
        assert all(p.snapshot_count == 24 for p in points)
        # last hour of each day is the representative
        assert points[0].total_count == 3 * 24 - 1

    def test_decimates_to_budget(self) -> None:
        feed = _hourly_feed(30)

        points = build_series(feed, Granularity.HOURLY, max_points=100, tz=UTC)

        assert len(points) <= 101
        assert points[-1].period_start == feed[-1].timestamp

    def test_weekly_bucket_overlapping_window_kept(self) -> None:
        feed = _hourly_feed(14)

        points = build_series(feed, "weekly", start_date=date(2025, 11, 5), end_date=date(2025, 11, 5), tz=UTC)

        assert len(points) == 1
        assert points[0].period_start == datetime(2025, 11, 3, tzinfo=UTC)
        assert points[0].snapshot_count == 24

    def test_empty_feed(self) -> None:
        assert build_series([], Granularity.DAILY) == []


def test_date_bounds_in_local_time() -> None:
    feed = [
        _snap(datetime(2025, 11, 8, 2, tzinfo=UTC)),
        _snap(datetime(2025, 11, 1, 12, tzinfo=UTC)),
    ]

    assert date_bounds(feed, tz=UTC) == (date(2025, 11, 1), date(2025, 11, 8))
    assert date_bounds(feed, tz=timezone(timedelta(hours=-5))) == (date(2025, 11, 1), date(2025, 11, 7))
    assert date_bounds([]) is None


def test_latest_total() -> None:
    assert latest_total([]) == 0
    assert latest_total(_hourly_feed(1)) == 23


def test_series_fields() -> None:
    assert series_fields(SeriesFilter.ALL) == ("total_count",)
    assert series_fields("local") == ("local_count",)
    assert series_fields(SeriesFilter.REMOTE) == ("remote_count",)
    assert set(series_fields("show-all")) == {
        "total_count",
        "local_count",
        "remote_count",
        "both_count",
        "unknown_count",
    }


def test_format_axis_label() -> None:
    ts = datetime(2025, 11, 7, 14, 5, tzinfo=UTC)

    assert format_axis_label(ts, Granularity.HOURLY, tz=UTC) == "14:05"
    assert format_axis_label(ts, Granularity.DAILY, tz=UTC) == "Nov 7"
    assert format_axis_label(ts, Granularity.WEEKLY, tz=UTC) == "Nov 7"
    assert format_axis_label(ts, Granularity.MONTHLY, tz=UTC) == "Nov 2025"
    assert format_axis_label(ts, "hourly", tz=timezone(timedelta(hours=2))) == "16:05"
