"""One-shot timer that returns the session to IDLE."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from interfaces import Timer, TimerFactory

DONE_RECOVERY_MS = 2000
ERROR_RECOVERY_MS = 3000


class RecoveryScheduler:
    """Holds at most one pending timer; arming replaces, never stacks."""

    def __init__(self, timer_factory: Optional[TimerFactory] = None) -> None:
        self._timer_factory: TimerFactory = timer_factory or _daemon_timer
        self._lock = threading.Lock()
        self._timer: Optional[Timer] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def arm(self, delay_ms: int, on_fire: Callable[[], None]) -> None:
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            generation = self._generation

            def _fire() -> None:
                with self._lock:
                    # A timer cancelled after it began running must stay silent.
                    if generation != self._generation or self._timer is None:
                        return
                    self._timer = None
                on_fire()

            timer = self._timer_factory(delay_ms / 1000.0, _fire)
            self._timer = timer
        timer.start()

    def cancel_pending(self) -> None:
        with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self._generation += 1


def _daemon_timer(interval_s: float, fn: Callable[[], None]) -> Timer:
    timer = threading.Timer(interval_s, fn)
    timer.daemon = True
    return timer
