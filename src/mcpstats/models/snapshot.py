"""Snapshot records from the registry analytics feed."""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import Any

from pydantic import TypeAdapter, ValidationError

from mcpstats.models._base import AnalyticsBaseModel, Count, UtcTimestamp


class ServerType(StrEnum):
    """Classification of a registry server by how it can be run."""

    LOCAL = "local"
    REMOTE = "remote"
    BOTH = "both"
    UNKNOWN = "unknown"


class Snapshot(AnalyticsBaseModel):
    """Point-in-time server counts published by the feed producer.

    No relation between ``total_count`` and the other counts is enforced;
    whether "unknown" servers are part of the total is the producer's call.
    """

    timestamp: UtcTimestamp
    local_count: Count
    remote_count: Count
    total_count: Count
    both_count: Count
    unknown_count: Count


_SNAPSHOT_LIST = TypeAdapter(list[Snapshot])


def parse_snapshots(payload: Any) -> list[Snapshot]:
    """Validate a decoded feed payload into snapshots.

    The payload must be a JSON array of objects, each carrying a string
    ``timestamp`` and all five counts as non-negative numbers.

    Raises
    ------
    ValueError
        If the payload does not have that shape.  The message names the
        first offending record.
    """
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array of snapshots, got {type(payload).__name__}")
    try:
        return _SNAPSHOT_LIST.validate_python(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ValueError(f"invalid snapshot at {location}: {first['msg']}") from exc


def dump_snapshots(snapshots: Sequence[Snapshot]) -> list[dict[str, Any]]:
    """Serialise snapshots back to the feed's JSON shape."""
    return [snapshot.to_wire() for snapshot in snapshots]
