"""Base model and timestamp handling for analytics feed records.

Every feed model inherits from :class:`AnalyticsBaseModel` which
provides:

* ``alias_generator=to_camel`` so the feed's camelCase keys map
  automatically to snake_case fields.
* Frozen instances: snapshots are immutable once fetched and buckets
  are never mutated after aggregation.

Timestamps are normalised to aware UTC datetimes on the way in and
rendered as ISO-8601 with a ``Z`` suffix on the way out.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, NonNegativeInt, PlainSerializer
from pydantic.alias_generators import to_camel


def parse_utc_timestamp(value: Any) -> datetime:
    """Convert an ISO-8601 string (or datetime) to an aware UTC datetime.

    Strings without an offset are taken to be UTC.  Anything that is not a
    string or datetime is rejected, so epoch numbers in the feed fail
    validation instead of being silently coerced.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"timestamp must be an ISO-8601 string, got {type(value).__name__}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_utc_timestamp(value: datetime) -> str:
    """Render *value* as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _require_number(value: Any) -> Any:
    # JSON numbers only: "5" and true are structural errors in the feed.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"count must be a number, got {type(value).__name__}")
    return value


UtcTimestamp = Annotated[
    datetime,
    BeforeValidator(parse_utc_timestamp),
    PlainSerializer(format_utc_timestamp, return_type=str, when_used="json"),
]
"""Annotated type for aware UTC datetimes carried as ISO-8601 strings."""

Count = Annotated[NonNegativeInt, BeforeValidator(_require_number)]
"""Annotated type for a non-negative server count given as a JSON number."""


class AnalyticsBaseModel(BaseModel):
    """Base for analytics feed and series models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialise to the camelCase JSON shape used by the feed and the cache."""
        return self.model_dump(mode="json", by_alias=True)
