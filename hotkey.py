"""Global toggle hotkey adapter based on pynput."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from models import DEFAULT_HOTKEY

try:
    from pynput import keyboard
except Exception:  # pragma: no cover
    keyboard = None  # type: ignore

logger = logging.getLogger(__name__)


class GlobalHotkeyAdapter:
    def __init__(self, hotkey: str = DEFAULT_HOTKEY) -> None:
        self._hotkey = hotkey
        self._listener: Optional[object] = None

    @property
    def hotkey(self) -> str:
        return self._hotkey

    def start(self, on_toggle: Callable[[], None]) -> None:
        if keyboard is None:
            raise RuntimeError("pynput is not installed")
        if self._listener is not None:
            return

        def _on_activate() -> None:
            logger.debug("Hotkey %s pressed", self._hotkey)
            on_toggle()

        try:
            listener = keyboard.GlobalHotKeys({self._hotkey: _on_activate})
        except ValueError as exc:
            raise RuntimeError(f"invalid hotkey {self._hotkey!r}: {exc}") from exc
        listener.start()
        self._listener = listener
        logger.info("Global hotkey %s registered", self._hotkey)

    def stop(self) -> None:
        listener = self._listener
        if listener is not None:
            listener.stop()
            self._listener = None
