"""Shared error codes, user-facing messages and exception types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models import Provider

RECORDING_FAILED = "RECORDING_FAILED"
MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
PROVIDER_FAILED = "PROVIDER_FAILED"
EMPTY_TRANSCRIPT = "EMPTY_TRANSCRIPT"
PASTE_FAILED = "PASTE_FAILED"
SETTINGS_LOAD_FAILED = "SETTINGS_LOAD_FAILED"
SETTINGS_SAVE_FAILED = "SETTINGS_SAVE_FAILED"

NO_TEXT_TRANSCRIBED = "no text transcribed"

ERROR_MESSAGES = {
    RECORDING_FAILED: "Microphone recording failed.",
    MISSING_CREDENTIAL: "API key is not configured.",
    PROVIDER_FAILED: "Transcription service failed.",
    EMPTY_TRANSCRIPT: NO_TEXT_TRANSCRIBED,
    PASTE_FAILED: "No active input target, result kept in clipboard.",
    SETTINGS_LOAD_FAILED: "Settings could not be read.",
    SETTINGS_SAVE_FAILED: "Settings could not be saved.",
}


class DictationError(Exception):
    code = ""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or ERROR_MESSAGES.get(self.code, self.code))

    @property
    def message(self) -> str:
        return str(self)


class RecordingError(DictationError):
    code = RECORDING_FAILED


class ProviderError(DictationError):
    code = PROVIDER_FAILED


class PasteError(DictationError):
    code = PASTE_FAILED


class SettingsLoadError(DictationError):
    code = SETTINGS_LOAD_FAILED


class SettingsSaveError(DictationError):
    code = SETTINGS_SAVE_FAILED


class MissingCredentialError(DictationError):
    code = MISSING_CREDENTIAL

    def __init__(self, provider: "Provider") -> None:
        self.provider = provider
        super().__init__(
            f"Please set your {provider.label} API key in Settings ({provider.value})"
        )
