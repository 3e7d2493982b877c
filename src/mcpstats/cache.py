"""Persistent cache of the last successfully fetched feed.

The cache lives in a plain string key/value store: one key holds the
serialised snapshot array, another the capture time as epoch
milliseconds.  Old data is never evicted; staleness only drives a
warning.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Protocol

from mcpstats._constants import CACHE_KEY, CACHE_MAX_AGE, CACHE_TIMESTAMP_KEY
from mcpstats.models.preferences import CacheStaleness
from mcpstats.models.snapshot import Snapshot, dump_snapshots, parse_snapshots

_logger = logging.getLogger(__name__)


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class KeyValueStorage(Protocol):
    """String key/value surface the cache and theme store persist into."""

    def get_item(self, key: str) -> str | None:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage:
    """Dict-backed storage; contents live as long as the object."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """Storage persisted as a single JSON object on disk.

    Every write rewrites the whole file through a temporary file and
    ``os.replace``, so readers never observe a half-written file.  A
    missing or corrupt file reads as empty.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw.decode("utf-8"))
        except ValueError:
            _logger.debug("Ignoring corrupt storage file %s", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _save(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, separators=(",", ":"))
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def set_items(self, items: dict[str, str]) -> None:
        """Write several keys in one file replacement."""
        data = self._load()
        data.update(items)
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


class SnapshotCache:
    """Write-through cache of the latest feed, used as a fallback on fetch failure."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        max_age: float = CACHE_MAX_AGE,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._storage = storage
        self._max_age_ms = max_age * 1000
        self._clock = clock

    def write(self, snapshots: Sequence[Snapshot]) -> None:
        """Replace the cached feed and stamp it with the current time."""
        items = {
            CACHE_KEY: json.dumps(dump_snapshots(snapshots), separators=(",", ":")),
            CACHE_TIMESTAMP_KEY: str(self._clock()),
        }
        set_items = getattr(self._storage, "set_items", None)
        if callable(set_items):
            set_items(items)
        else:
            for key, value in items.items():
                self._storage.set_item(key, value)
        _logger.debug("Cached %d snapshots", len(snapshots))

    def read_stale(self) -> list[Snapshot] | None:
        """Return the cached feed regardless of age, or ``None``."""
        raw = self._storage.get_item(CACHE_KEY)
        if not raw:
            return None
        try:
            return parse_snapshots(json.loads(raw))
        except ValueError:
            # json.JSONDecodeError is a ValueError too.
            _logger.debug("Cached feed is unreadable; treating as empty", exc_info=True)
            return None

    def _read_timestamp_ms(self) -> int | None:
        raw = self._storage.get_item(CACHE_TIMESTAMP_KEY)
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            _logger.debug("Cache timestamp %r is unreadable", raw)
            return None

    def read_timestamp(self) -> datetime | None:
        """Capture time of the cached feed, or ``None``."""
        ts_ms = self._read_timestamp_ms()
        if ts_ms is None:
            return None
        return datetime.fromtimestamp(ts_ms / 1000, tz=UTC)

    def staleness_info(self) -> CacheStaleness | None:
        ts_ms = self._read_timestamp_ms()
        if ts_ms is None:
            return None
        age_ms = self._clock() - ts_ms
        return CacheStaleness(
            timestamp=datetime.fromtimestamp(ts_ms / 1000, tz=UTC),
            age=timedelta(milliseconds=age_ms),
            is_stale=age_ms > self._max_age_ms,
        )

    def clear(self) -> None:
        self._storage.remove_item(CACHE_KEY)
        self._storage.remove_item(CACHE_TIMESTAMP_KEY)
