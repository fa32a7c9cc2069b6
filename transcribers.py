"""HTTP transcription backends.

Both backends take a finished WAV file and return the full transcript in a
single request. They raise ``ProviderError`` carrying the upstream message so
the user can tell a bad key from an exhausted quota.
"""

from __future__ import annotations

import base64
import logging
import wave
from pathlib import Path
from typing import Optional

from errors import ProviderError
from models import DEFAULT_LANGUAGE, TranscriptionResult

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import requests
except Exception:  # pragma: no cover
    requests = None  # type: ignore

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/audio/transcriptions"
GOOGLE_URL = "https://speech.googleapis.com/v1p1beta1/speech:recognize"
SILENCE_PEAK = 100


def _read_audio(audio_path: str) -> bytes:
    path = Path(audio_path)
    if not path.exists():
        raise ProviderError(f"Audio file does not exist: {audio_path}")
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ProviderError(f"read audio: {exc}") from exc
    if not data:
        raise ProviderError("Audio file is empty")
    return data


def _require_requests() -> None:
    if requests is None:
        raise ProviderError("requests is not installed")


class OpenAITranscriber:
    def __init__(
        self,
        model: str = "whisper-1",
        prompt: Optional[str] = None,
        request_timeout_s: float = 30.0,
        url: str = OPENAI_URL,
    ) -> None:
        self._model = model
        self._prompt = prompt
        self._request_timeout_s = request_timeout_s
        self._url = url

    def transcribe(
        self,
        audio_path: str,
        credential: str,
        language_code: Optional[str] = None,
    ) -> TranscriptionResult:
        _require_requests()
        audio = _read_audio(audio_path)
        logger.debug("OpenAI transcribe: %d bytes from %s", len(audio), audio_path)

        data = {"model": self._model}
        if language_code:
            data["language"] = language_code
        if self._prompt:
            data["prompt"] = self._prompt
        try:
            resp = requests.post(
                self._url,
                headers={"Authorization": f"Bearer {credential}"},
                files={"file": ("audio.wav", audio, "audio/wav")},
                data=data,
                timeout=self._request_timeout_s,
            )
        except requests.RequestException as exc:
            raise ProviderError(f"network: {exc}") from exc

        logger.debug("OpenAI transcribe: response status %s", resp.status_code)
        if not resp.ok:
            raise ProviderError(f"OpenAI error {resp.status_code}: {resp.text}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProviderError(f"json: {exc}") from exc
        return TranscriptionResult(text=str(payload.get("text") or ""))


class GoogleTranscriber:
    def __init__(
        self,
        model: str = "default",
        automatic_punctuation: bool = True,
        request_timeout_s: float = 30.0,
        url: str = GOOGLE_URL,
    ) -> None:
        self._model = model
        self._automatic_punctuation = automatic_punctuation
        self._request_timeout_s = request_timeout_s
        self._url = url

    def transcribe(
        self,
        audio_path: str,
        credential: str,
        language_code: Optional[str] = None,
    ) -> TranscriptionResult:
        _require_requests()
        audio = _read_audio(audio_path)
        sample_rate = self._inspect_wav(audio_path)

        body = {
            "audio": {"content": base64.b64encode(audio).decode("ascii")},
            "config": {
                "enableAutomaticPunctuation": self._automatic_punctuation,
                "encoding": "LINEAR16",
                "languageCode": language_code or DEFAULT_LANGUAGE,
                "model": self._model,
                "sampleRateHertz": sample_rate,
            },
        }
        try:
            resp = requests.post(
                self._url,
                params={"key": credential},
                json=body,
                timeout=self._request_timeout_s,
            )
        except requests.RequestException as exc:
            raise ProviderError(f"network: {exc}") from exc

        logger.debug("Google transcribe: response status %s", resp.status_code)
        if not resp.ok:
            raise ProviderError(f"Google Speech error {resp.status_code}: {resp.text}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProviderError(f"json: {exc}") from exc
        return TranscriptionResult(text=self._extract_text(payload))

    def _inspect_wav(self, audio_path: str) -> int:
        """Validate the WAV header and return its sample rate."""
        try:
            with wave.open(audio_path, "rb") as wf:
                sample_width = wf.getsampwidth()
                sample_rate = wf.getframerate()
                frames = wf.readframes(wf.getnframes())
        except (wave.Error, EOFError, OSError) as exc:
            raise ProviderError(f"wav open: {exc}") from exc

        if sample_width != 2:
            raise ProviderError("Google Speech-to-Text requires 16-bit LINEAR16 audio")
        if not frames:
            raise ProviderError("Audio file contains no samples")
        if np is not None:
            peak = int(np.abs(np.frombuffer(frames, dtype=np.int16).astype(np.int32)).max())
            if peak < SILENCE_PEAK:
                logger.warning("Audio appears to be silent (peak amplitude %d)", peak)
        return sample_rate

    def _extract_text(self, payload: object) -> str:
        if not isinstance(payload, dict):
            raise ProviderError("Invalid response format: expected a JSON object")
        results = payload.get("results")
        if results is None:
            logger.info("Google transcribe: no speech detected")
            return ""
        if not isinstance(results, list):
            raise ProviderError("Invalid response format: results is not an array")
        parts = []
        for result in results:
            alternatives = result.get("alternatives") or []
            if alternatives:
                transcript = str(alternatives[0].get("transcript", "")).strip()
                if transcript:
                    parts.append(transcript)
        return " ".join(parts)
