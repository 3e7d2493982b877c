"""Tests for snapshot bucketing and decimation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from mcpstats.aggregation import aggregate_by_granularity, decimate, period_end, period_start
from mcpstats.models.series import Granularity, TimeSeriesPoint
from mcpstats.models.snapshot import Snapshot


def _snap(timestamp: str, local: int = 386, remote: int = 384, total: int = 755) -> Snapshot:
    return Snapshot.model_validate(
        {
            "timestamp": timestamp,
            "localCount": local,
            "remoteCount": remote,
            "totalCount": total,
            "bothCount": 15,
            "unknownCount": 27,
        }
    )


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


# ------------------------------------------------------------------
# Period boundaries
# ------------------------------------------------------------------


class TestPeriodBoundaries:
    TS = _utc(2025, 11, 7, 14, 45, 29)

    def test_hour(self) -> None:
        assert period_start(self.TS, Granularity.HOURLY) == _utc(2025, 11, 7, 14)
        assert period_end(self.TS, Granularity.HOURLY) == _utc(2025, 11, 7, 14, 59, 59, 999000)

    def test_day(self) -> None:
        assert period_start(self.TS, Granularity.DAILY) == _utc(2025, 11, 7)
        assert period_end(self.TS, Granularity.DAILY) == _utc(2025, 11, 7, 23, 59, 59, 999000)

    def test_week_starts_monday(self) -> None:
        assert period_start(self.TS, Granularity.WEEKLY) == _utc(2025, 11, 3)
        assert period_end(self.TS, Granularity.WEEKLY) == _utc(2025, 11, 9, 23, 59, 59, 999000)

    def test_sunday_belongs_to_preceding_monday(self) -> None:
        sunday = _utc(2025, 11, 9, 22, 0)
        assert period_start(sunday, Granularity.WEEKLY) == _utc(2025, 11, 3)

    def test_week_spanning_year_end(self) -> None:
        ts = _utc(2026, 1, 1, 8)
        assert period_start(ts, Granularity.WEEKLY) == _utc(2025, 12, 29)
        assert period_end(ts, Granularity.WEEKLY) == _utc(2026, 1, 4, 23, 59, 59, 999000)

    def test_month_respects_length(self) -> None:
        assert period_start(self.TS, Granularity.MONTHLY) == _utc(2025, 11, 1)
        assert period_end(self.TS, Granularity.MONTHLY) == _utc(2025, 11, 30, 23, 59, 59, 999000)
        assert period_end(_utc(2024, 2, 10), Granularity.MONTHLY) == _utc(2024, 2, 29, 23, 59, 59, 999000)
        assert period_end(_utc(2025, 12, 10), Granularity.MONTHLY) == _utc(2025, 12, 31, 23, 59, 59, 999000)

    def test_non_utc_input_is_normalised(self) -> None:
        # 2025-11-08 01:30 at +02:00 is still 2025-11-07 in UTC.
        ts = datetime(2025, 11, 8, 1, 30, tzinfo=timezone(timedelta(hours=2)))
        assert period_start(ts, Granularity.DAILY) == _utc(2025, 11, 7)


# ------------------------------------------------------------------
# aggregate_by_granularity
# ------------------------------------------------------------------


class TestAggregate:
    SAMPLE = [
        _snap("2025-11-07T14:45:29Z"),
        _snap("2025-11-07T14:52:54Z"),
        _snap("2025-11-07T15:51:01Z", local=387, total=756),
        _snap("2025-11-07T16:21:00Z", local=387, total=756),
    ]

    def test_empty(self) -> None:
        assert aggregate_by_granularity([], Granularity.DAILY) == []

    def test_small_hourly_dataset_keeps_individual_snapshots(self) -> None:
        result = aggregate_by_granularity(self.SAMPLE, Granularity.HOURLY)

        assert len(result) == 4
        for point, snapshot in zip(result, self.SAMPLE, strict=True):
            assert point.snapshot_count == 1
            assert point.period_start == point.period_end == snapshot.timestamp

    def test_nine_snapshots_stay_individual(self) -> None:
        snapshots = [_snap(f"2025-11-07T14:0{i}:00Z") for i in range(9)]

        result = aggregate_by_granularity(snapshots, Granularity.HOURLY)

        assert len(result) == 9
        assert all(point.snapshot_count == 1 for point in result)

    def test_ten_snapshots_in_one_hour_collapse(self) -> None:
        snapshots = [_snap(f"2025-11-07T14:{i:02d}:00Z", local=i) for i in range(10)]

        result = aggregate_by_granularity(snapshots, Granularity.HOURLY)

        assert len(result) == 1
        point = result[0]
        assert point.snapshot_count == 10
        assert point.local_count == 9
        assert point.period_start == _utc(2025, 11, 7, 14)
        assert point.period_end == _utc(2025, 11, 7, 14, 59, 59, 999000)

    def test_identical_instants_share_a_bucket_in_small_dataset(self) -> None:
        snapshots = [_snap("2025-11-07T14:00:00Z", local=1), _snap("2025-11-07T14:00:00Z", local=2)]

        result = aggregate_by_granularity(snapshots, Granularity.HOURLY)

        assert len(result) == 1
        assert result[0].snapshot_count == 2
        assert result[0].local_count == 2

    def test_daily_buckets_split_on_utc_midnight(self) -> None:
        snapshots = [_snap("2025-11-07T23:45:00Z", local=1), _snap("2025-11-08T00:15:00Z", local=2)]

        result = aggregate_by_granularity(snapshots, Granularity.DAILY)

        assert [p.period_start for p in result] == [_utc(2025, 11, 7), _utc(2025, 11, 8)]
        assert [p.local_count for p in result] == [1, 2]

    def test_offset_timestamps_group_by_utc_day(self) -> None:
        # 01:00 at +02:00 is 23:00 UTC the previous day.
        snapshots = [_snap("2025-11-08T01:00:00+02:00"), _snap("2025-11-07T10:00:00Z")]

        result = aggregate_by_granularity(snapshots, Granularity.DAILY)

        assert len(result) == 1
        assert result[0].snapshot_count == 2

    def test_last_snapshot_in_input_order_wins(self) -> None:
        snapshots = [
            _snap("2025-11-07T18:00:00Z", local=300),
            _snap("2025-11-07T09:00:00Z", local=100),
        ]

        result = aggregate_by_granularity(snapshots, Granularity.DAILY)

        assert result[0].local_count == 100
        assert result[0].snapshot_count == 2

    def test_all_counts_copied_from_representative(self) -> None:
        result = aggregate_by_granularity(self.SAMPLE, Granularity.DAILY)

        point = result[0]
        assert point.granularity == Granularity.DAILY
        assert (point.local_count, point.remote_count, point.total_count) == (387, 384, 756)
        assert (point.both_count, point.unknown_count) == (15, 27)
        assert point.snapshot_count == 4

    def test_weekly_and_monthly(self) -> None:
        snapshots = [
            _snap("2025-11-03T00:00:00Z"),
            _snap("2025-11-09T23:59:59Z"),
            _snap("2025-11-10T00:00:00Z"),
            _snap("2025-12-01T00:00:00Z"),
        ]

        weekly = aggregate_by_granularity(snapshots, Granularity.WEEKLY)
        monthly = aggregate_by_granularity(snapshots, Granularity.MONTHLY)

        assert [(p.period_start, p.snapshot_count) for p in weekly] == [
            (_utc(2025, 11, 3), 2),
            (_utc(2025, 11, 10), 1),
            (_utc(2025, 12, 1), 1),
        ]
        assert [(p.period_start, p.snapshot_count) for p in monthly] == [
            (_utc(2025, 11, 1), 3),
            (_utc(2025, 12, 1), 1),
        ]

    def test_output_sorted_for_unsorted_input(self) -> None:
        snapshots = [
            _snap("2025-11-09T10:00:00Z"),
            _snap("2025-11-07T10:00:00Z"),
            _snap("2025-11-08T10:00:00Z"),
        ]

        result = aggregate_by_granularity(snapshots, Granularity.DAILY)
        starts = [p.period_start for p in result]

        assert starts == sorted(starts)
        assert len(set(starts)) == len(starts)

    def test_deterministic(self) -> None:
        snapshots = [_snap(f"2025-11-{day:02d}T{hour:02d}:30:00Z") for day in range(1, 8) for hour in (3, 15)]

        for granularity in Granularity:
            assert aggregate_by_granularity(snapshots, granularity) == aggregate_by_granularity(
                snapshots, granularity
            )

    def test_accepts_granularity_string(self) -> None:
        assert aggregate_by_granularity(self.SAMPLE, "daily") == aggregate_by_granularity(
            self.SAMPLE, Granularity.DAILY
        )

    def test_rejects_unknown_granularity(self) -> None:
        with pytest.raises(ValueError):
            aggregate_by_granularity(self.SAMPLE, "yearly")


# ------------------------------------------------------------------
# decimate
# ------------------------------------------------------------------


def _points(count: int) -> list[TimeSeriesPoint]:
    base = _utc(2020, 1, 1)
    return [
        TimeSeriesPoint(
            period_start=base + timedelta(hours=i),
            period_end=base + timedelta(hours=i, minutes=59),
            granularity=Granularity.HOURLY,
            local_count=i,
            remote_count=0,
            total_count=i,
        )
        for i in range(count)
    ]


class TestDecimate:
    def test_small_input_unchanged(self) -> None:
        points = _points(1000)

        result = decimate(points, 1000)

        assert result == points
        assert all(a is b for a, b in zip(result, points, strict=True))

    def test_uniform_stride_keeps_first_and_last(self) -> None:
        points = _points(2500)

        result = decimate(points, 1000)

        # ceil(2500 / 1000) == 3
        assert result[0] is points[0]
        assert result[1] is points[3]
        assert result[-1] is points[-1]
        assert len(result) <= 1001
        assert len(result) == 834

    def test_last_point_appended_when_stride_skips_it(self) -> None:
        points = _points(11)

        result = decimate(points, 5)

        # stride 3 keeps 0, 3, 6, 9 and then appends 10
        assert [p.local_count for p in result] == [0, 3, 6, 9, 10]

    def test_may_exceed_budget_by_one(self) -> None:
        result = decimate(_points(6), 3)

        # stride 2 keeps 0, 2, 4 and the appended last point makes four
        assert [p.local_count for p in result] == [0, 2, 4, 5]

    def test_order_preserved(self) -> None:
        result = decimate(_points(5000), 100)
        starts = [p.period_start for p in result]

        assert starts == sorted(starts)

    def test_rejects_empty_budget(self) -> None:
        with pytest.raises(ValueError):
            decimate(_points(3), 0)
