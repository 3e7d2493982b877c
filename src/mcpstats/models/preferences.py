"""Persisted display preferences and cache status."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ThemePreference(StrEnum):
    LIGHT = "light"
    DARK = "dark"


class CacheStaleness(BaseModel):
    """Age of the cached feed as seen at the time of the check."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    age: timedelta
    is_stale: bool
