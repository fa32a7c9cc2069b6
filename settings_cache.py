"""Last-loaded settings snapshot with explicit reload."""

from __future__ import annotations

import logging
import threading

from errors import SettingsLoadError
from interfaces import SettingsStore
from models import Settings

logger = logging.getLogger(__name__)


class SettingsCache:
    def __init__(self, store: SettingsStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._snapshot = Settings()
        self._stale = True

    @property
    def stale(self) -> bool:
        return self._stale

    def current(self) -> Settings:
        """Return the cached snapshot without touching the store."""
        return self._snapshot

    def reload(self) -> Settings:
        """Read the store and replace the snapshot.

        On failure the previous snapshot stays in place and the
        ``SettingsLoadError`` propagates to the caller.
        """
        try:
            fresh = self._store.load_settings()
        except SettingsLoadError:
            logger.warning("Settings reload failed, keeping previous snapshot")
            raise
        except Exception as exc:
            logger.warning("Settings reload failed: %s", exc)
            raise SettingsLoadError(str(exc)) from exc
        with self._lock:
            self._snapshot = fresh
            self._stale = False
        return fresh

    def invalidate(self) -> None:
        self._stale = True

    def refresh_if_stale(self) -> Settings:
        """Reload only when invalidated; a failed reload leaves the cache stale."""
        if not self._stale:
            return self._snapshot
        try:
            return self.reload()
        except SettingsLoadError:
            return self._snapshot
