"""Debounce filter for the global toggle signal."""

from __future__ import annotations

import threading
import time
from typing import Optional

DEBOUNCE_MS = 150


def now_ms() -> int:
    return int(time.monotonic() * 1000)


class ToggleGate:
    """Drops toggle signals arriving within ``min_interval_ms`` of the last accepted one.

    Global hotkey hooks can deliver the same key press twice within a few
    tens of milliseconds. The gate knows nothing about session phases.
    """

    def __init__(self, min_interval_ms: int = DEBOUNCE_MS) -> None:
        self._min_interval_ms = min_interval_ms
        self._last_accepted_ms: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def last_accepted_ms(self) -> Optional[int]:
        return self._last_accepted_ms

    def accept(self, now: Optional[int] = None) -> bool:
        if now is None:
            now = now_ms()
        with self._lock:
            last = self._last_accepted_ms
            if last is not None and now - last < self._min_interval_ms:
                return False
            self._last_accepted_ms = now
            return True
