"""Internal constants shared across the library."""

BASE_URL = "http://localhost:3000"
FEED_PATH = "/data/analytics-latest.json"
USER_AGENT = "mcpstats"

#: Per-attempt deadline in seconds.
REQUEST_TIMEOUT = 10.0
MAX_ATTEMPTS = 3
#: Backoff after failed attempt 1, 2, 3 (the last one is never used with 3 attempts).
RETRY_DELAYS: tuple[float, ...] = (1.0, 2.0, 4.0)

#: Cached feed older than this (seconds) is reported as stale.
CACHE_MAX_AGE = 5 * 60.0
CACHE_KEY = "mcp-analytics-cache"
CACHE_TIMESTAMP_KEY = "mcp-analytics-cache-timestamp"
THEME_STORAGE_KEY = "mcp-analytics-theme"

#: Point budget for chart series.
MAX_POINTS = 1000

#: Below this many snapshots, hourly aggregation shows every snapshot on its own.
INDIVIDUAL_SNAPSHOT_THRESHOLD = 10
