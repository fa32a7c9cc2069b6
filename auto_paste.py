"""Auto paste service for text insertion."""

from __future__ import annotations

import logging
import sys
import time

from errors import PasteError
from models import PasteResult

try:
    import pyperclip
except Exception:  # pragma: no cover
    pyperclip = None  # type: ignore

try:
    from pynput.keyboard import Controller, Key
except Exception:  # pragma: no cover
    Controller = None  # type: ignore
    Key = None  # type: ignore

logger = logging.getLogger(__name__)


class ClipboardPasteService:
    """Puts text on the clipboard, then sends the platform paste shortcut.

    The clipboard is written first and left holding the text, so a failed
    keystroke still leaves the transcript one paste away.
    """

    def __init__(self, settle_delay_s: float = 0.05, platform: str = sys.platform) -> None:
        self._settle_delay_s = settle_delay_s
        self._platform = platform

    def paste_text(self, text: str) -> PasteResult:
        if pyperclip is None:
            raise PasteError("clipboard dependency missing")
        try:
            pyperclip.copy(text)
        except Exception as exc:
            raise PasteError(f"clipboard: {exc}") from exc

        if Controller is None or Key is None:
            return PasteResult(pasted=False, reason="keyboard dependency missing")

        modifier = Key.cmd if self._platform == "darwin" else Key.ctrl
        try:
            time.sleep(self._settle_delay_s)
            keyboard = Controller()
            keyboard.press(modifier)
            keyboard.press("v")
            keyboard.release("v")
            keyboard.release(modifier)
        except Exception as exc:
            logger.warning("Simulated paste failed: %s", exc)
            return PasteResult(pasted=False, reason=str(exc))
        return PasteResult(pasted=True, reason="ok")
