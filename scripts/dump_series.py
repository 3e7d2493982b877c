#!/usr/bin/env python3
"""Fetch the analytics feed and print a chart-ready series.

Runs the same pipeline the dashboard uses: fetch (with retry and cache
fallback), date-range filter, bucketing, decimation.

Usage
-----
::

    export MCPSTATS_BASE_URL="https://stats.example.com"
    python scripts/dump_series.py --granularity weekly --start 2025-10-01

Options::

    --granularity G     hourly, daily, weekly or monthly (default: daily)
    --start YYYY-MM-DD  First day to include
    --end YYYY-MM-DD    Last day to include
    --series S          all, show-all, local or remote (default: all)
    --max-points N      Point budget (default: config.max_points)
    --json              Output as machine-readable JSON
    --output FILE       Write JSON output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from mcpstats import (  # noqa: E402
    AnalyticsClient,
    AnalyticsConfig,
    FetchCancelledError,
    Granularity,
    SeriesFilter,
    StaleDataError,
    UnreachableError,
    build_series,
    format_axis_label,
    latest_total,
    series_fields,
)


def _table(points: list[Any], granularity: Granularity, fields: tuple[str, ...]) -> list[str]:
    header = ["period".ljust(12), *(name.removesuffix("_count").rjust(8) for name in fields), "n".rjust(5)]
    lines = ["  ".join(header)]
    for point in points:
        label = format_axis_label(point.period_start, granularity).ljust(12)
        values = [str(getattr(point, name)).rjust(8) for name in fields]
        lines.append("  ".join([label, *values, str(point.snapshot_count).rjust(5)]))
    return lines


async def main() -> int:
    parser = argparse.ArgumentParser(description="Print an aggregated MCP registry analytics series.")
    parser.add_argument("--granularity", "-g", choices=[g.value for g in Granularity], default="daily")
    parser.add_argument("--start", help="First day to include (YYYY-MM-DD)")
    parser.add_argument("--end", help="Last day to include (YYYY-MM-DD)")
    parser.add_argument("--series", choices=[s.value for s in SeriesFilter], default="all")
    parser.add_argument("--max-points", type=int, help="Point budget")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write JSON output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = AnalyticsConfig.from_env()
    granularity = Granularity(args.granularity)
    warning: str | None = None

    async with AnalyticsClient(config) as client:
        try:
            snapshots = await client.fetch_analytics()
        except FetchCancelledError:
            return 1
        except StaleDataError as exc:
            snapshots = exc.cached_data
            warning = str(exc)
        except UnreachableError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2

    points = build_series(
        snapshots,
        granularity,
        start_date=args.start,
        end_date=args.end,
        max_points=args.max_points or config.max_points,
    )
    fields = series_fields(args.series)

    if warning:
        print(f"warning: {warning}", file=sys.stderr)

    if args.json_mode or args.output:
        payload = json.dumps(
            {
                "granularity": granularity.value,
                "latestTotal": latest_total(snapshots),
                "points": [point.to_wire() for point in points],
            },
            indent=2,
        )
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"JSON written to {args.output}", file=sys.stderr)
        else:
            print(payload)
        return 0

    print(f"{len(snapshots)} snapshots, latest total {latest_total(snapshots)}")
    print("\n".join(_table(points, granularity, fields)))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
