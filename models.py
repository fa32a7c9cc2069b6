"""Core data models for the app."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

DEFAULT_LANGUAGE = "en-US"
DEFAULT_HOTKEY = "<ctrl>+<shift>+t"


class Phase(str, Enum):
    IDLE = "IDLE"
    RECORDING = "RECORDING"
    TRANSCRIBING = "TRANSCRIBING"
    PASTING = "PASTING"
    DONE = "DONE"
    ERROR = "ERROR"


class Provider(str, Enum):
    OPENAI = "openai"
    GOOGLE = "google"

    @property
    def label(self) -> str:
        return "OpenAI" if self is Provider.OPENAI else "Google"

    @property
    def requires_language(self) -> bool:
        return self is Provider.GOOGLE

    @classmethod
    def parse(cls, value: object) -> "Provider":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OPENAI


@dataclass(frozen=True)
class Settings:
    provider: Provider = Provider.OPENAI
    credentials: Mapping[Provider, str] = field(default_factory=dict)
    language_code: str = DEFAULT_LANGUAGE
    input_device_name: str = ""
    panel_visible: bool = True
    hotkey: str = DEFAULT_HOTKEY

    def credential_for(self, provider: Provider) -> str:
        return (self.credentials.get(provider) or "").strip()


@dataclass(frozen=True)
class ResolvedProvider:
    provider: Provider
    credential: str
    language_code: Optional[str] = None


@dataclass(frozen=True)
class RecordingHandle:
    token: str
    audio_path: str


@dataclass
class RecordingResult:
    audio_path: str
    sample_rate_hz: int
    duration_ms: int


@dataclass
class TranscriptionResult:
    text: str


@dataclass
class PasteResult:
    pasted: bool
    reason: str = ""


class OutcomeKind(str, Enum):
    PASTED = "pasted"
    COPIED = "copied"
    EMPTY_TRANSCRIPT = "empty_transcript"
    FAILED = "failed"


@dataclass
class CycleOutcome:
    kind: OutcomeKind
    text: str = ""
    code: str = ""
    message: str = ""
