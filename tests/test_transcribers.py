"""Tests for the OpenAI and Google transcription backends."""

from __future__ import annotations

import base64
import wave
from pathlib import Path
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
import requests

from errors import ProviderError
from transcribers import GOOGLE_URL, OPENAI_URL, GoogleTranscriber, OpenAITranscriber


# ---------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------

def _write_wav(path: Path, amplitude: int = 2000, sample_rate: int = 16000, width: int = 2) -> str:
    samples = np.full(1600, amplitude, dtype=np.int16)
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(width)
        wf.setframerate(sample_rate)
        if width == 2:
            wf.writeframes(samples.tobytes())
        else:
            wf.writeframes(b"\x80" * 1600)
    return str(path)


def _response(status: int = 200, payload: object = None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    resp.json.return_value = payload if payload is not None else {}
    return resp


# ---------------------------------------------------------------
# Shared file checks
# ---------------------------------------------------------------

@pytest.mark.parametrize("transcriber", [OpenAITranscriber(), GoogleTranscriber()])
def test_missing_file_raises(transcriber, tmp_path: Path) -> None:  # noqa: ANN001
    with pytest.raises(ProviderError, match="does not exist"):
        transcriber.transcribe(str(tmp_path / "nope.wav"), "key")


@pytest.mark.parametrize("transcriber", [OpenAITranscriber(), GoogleTranscriber()])
def test_empty_file_raises(transcriber, tmp_path: Path) -> None:  # noqa: ANN001
    path = tmp_path / "empty.wav"
    path.write_bytes(b"")
    with pytest.raises(ProviderError, match="empty"):
        transcriber.transcribe(str(path), "key")


# ---------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------

@patch("transcribers.requests.post")
def test_openai_success(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav")
    mock_post.return_value = _response(payload={"text": "hello world"})

    result = OpenAITranscriber().transcribe(audio, "sk-test")

    assert result.text == "hello world"
    args, kwargs = mock_post.call_args
    assert args[0] == OPENAI_URL
    assert kwargs["headers"] == {"Authorization": "Bearer sk-test"}
    assert kwargs["data"] == {"model": "whisper-1"}
    name, _, mime = kwargs["files"]["file"]
    assert (name, mime) == ("audio.wav", "audio/wav")


@patch("transcribers.requests.post")
def test_openai_passes_language_and_prompt(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav")
    mock_post.return_value = _response(payload={"text": "bonjour"})

    OpenAITranscriber(prompt="names: Zoe").transcribe(audio, "sk", "fr")

    data = mock_post.call_args.kwargs["data"]
    assert data["language"] == "fr"
    assert data["prompt"] == "names: Zoe"


@patch("transcribers.requests.post")
def test_openai_http_error_keeps_upstream_body(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav")
    mock_post.return_value = _response(401, text='{"error": "invalid api key"}')

    with pytest.raises(ProviderError) as info:
        OpenAITranscriber().transcribe(audio, "bad")

    assert str(info.value) == 'OpenAI error 401: {"error": "invalid api key"}'


@patch("transcribers.requests.post")
def test_openai_network_error(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav")
    mock_post.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(ProviderError, match="network: connection refused"):
        OpenAITranscriber().transcribe(audio, "sk")


@patch("transcribers.requests.post")
def test_openai_missing_text_field_is_empty(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav")
    mock_post.return_value = _response(payload={})

    assert OpenAITranscriber().transcribe(audio, "sk").text == ""


# ---------------------------------------------------------------
# Google
# ---------------------------------------------------------------

@patch("transcribers.requests.post")
def test_google_request_body(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav", sample_rate=44100)
    mock_post.return_value = _response(
        payload={"results": [{"alternatives": [{"transcript": "hello there"}]}]}
    )

    result = GoogleTranscriber().transcribe(audio, "g-key", "en-GB")

    assert result.text == "hello there"
    args, kwargs = mock_post.call_args
    assert args[0] == GOOGLE_URL
    assert kwargs["params"] == {"key": "g-key"}
    config = kwargs["json"]["config"]
    assert config == {
        "enableAutomaticPunctuation": True,
        "encoding": "LINEAR16",
        "languageCode": "en-GB",
        "model": "default",
        "sampleRateHertz": 44100,
    }
    content = kwargs["json"]["audio"]["content"]
    assert base64.b64decode(content) == Path(audio).read_bytes()


@patch("transcribers.requests.post")
def test_google_defaults_language(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav")
    mock_post.return_value = _response(payload={"results": []})

    GoogleTranscriber().transcribe(audio, "g-key")

    assert mock_post.call_args.kwargs["json"]["config"]["languageCode"] == "en-US"


@patch("transcribers.requests.post")
def test_google_joins_multiple_results(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav")
    mock_post.return_value = _response(
        payload={
            "results": [
                {"alternatives": [{"transcript": "first part"}]},
                {"alternatives": []},
                {"alternatives": [{"transcript": " second part"}]},
            ]
        }
    )

    assert GoogleTranscriber().transcribe(audio, "g").text == "first part second part"


@patch("transcribers.requests.post")
def test_google_no_results_is_empty_transcript(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav", amplitude=0)
    mock_post.return_value = _response(payload={})

    assert GoogleTranscriber().transcribe(audio, "g").text == ""


@patch("transcribers.requests.post")
def test_google_results_not_a_list(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav")
    mock_post.return_value = _response(payload={"results": "oops"})

    with pytest.raises(ProviderError, match="results is not an array"):
        GoogleTranscriber().transcribe(audio, "g")


@patch("transcribers.requests.post")
def test_google_http_error(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav")
    mock_post.return_value = _response(403, text="API key not valid")

    with pytest.raises(ProviderError, match="Google Speech error 403: API key not valid"):
        GoogleTranscriber().transcribe(audio, "g")


@patch("transcribers.requests.post")
def test_google_rejects_8_bit_audio(mock_post: MagicMock, tmp_path: Path) -> None:
    audio = _write_wav(tmp_path / "a.wav", width=1)

    with pytest.raises(ProviderError, match="16-bit"):
        GoogleTranscriber().transcribe(audio, "g")
    mock_post.assert_not_called()


@patch("transcribers.requests.post")
def test_google_rejects_non_wav(mock_post: MagicMock, tmp_path: Path) -> None:
    path = tmp_path / "a.wav"
    path.write_bytes(b"not a wav file at all")

    with pytest.raises(ProviderError, match="wav open"):
        GoogleTranscriber().transcribe(str(path), "g")
    mock_post.assert_not_called()
