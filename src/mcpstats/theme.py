"""Light/dark theme preference persisted next to the feed cache."""

from __future__ import annotations

from mcpstats._constants import THEME_STORAGE_KEY
from mcpstats.cache import KeyValueStorage
from mcpstats.models.preferences import ThemePreference


class ThemeStore:
    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    def get_stored(self) -> ThemePreference | None:
        """Stored preference, ignoring anything other than ``light``/``dark``."""
        stored = self._storage.get_item(THEME_STORAGE_KEY)
        if stored in (ThemePreference.LIGHT, ThemePreference.DARK):
            return ThemePreference(stored)
        return None

    def set_stored(self, theme: ThemePreference | str) -> None:
        self._storage.set_item(THEME_STORAGE_KEY, ThemePreference(theme).value)

    def initial(self, system_default: ThemePreference = ThemePreference.LIGHT) -> ThemePreference:
        return self.get_stored() or system_default
