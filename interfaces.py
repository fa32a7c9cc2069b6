"""Protocol interfaces used by SessionController."""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from models import PasteResult, RecordingHandle, RecordingResult, Settings, TranscriptionResult


class Recorder(Protocol):
    def start_recording(self) -> RecordingHandle: ...

    def stop_recording(self, handle: RecordingHandle) -> RecordingResult: ...


class Transcriber(Protocol):
    def transcribe(
        self,
        audio_path: str,
        credential: str,
        language_code: Optional[str] = None,
    ) -> TranscriptionResult: ...


class PasteService(Protocol):
    def paste_text(self, text: str) -> PasteResult: ...


class SettingsStore(Protocol):
    def load_settings(self) -> Settings: ...

    def save_settings(self, settings: Settings) -> None: ...


class Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]
