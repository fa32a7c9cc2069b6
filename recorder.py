"""Microphone recorder that captures into a temporary WAV file."""

from __future__ import annotations

import logging
import threading
import uuid
import wave
from dataclasses import dataclass, field
from pathlib import Path
from queue import Queue
from typing import Any, Callable, Optional

from errors import RecordingError
from models import RecordingHandle, RecordingResult

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)

CACHE_DIR = Path.home() / ".cache" / "quickdictate"
SAMPLE_WIDTH = 2


@dataclass
class _ActiveRecording:
    handle: RecordingHandle
    chunks: Queue
    writer: Optional[threading.Thread] = None
    stream: Any = None
    frames_written: int = 0
    error: Optional[BaseException] = field(default=None)


class SoundDeviceRecorder:
    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_ms: int = 100,
        cache_dir: Optional[Path] = None,
        device_name: Optional[Callable[[], str]] = None,
        writer_timeout_s: float = 5.0,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_ms = chunk_ms
        self._cache_dir = cache_dir or CACHE_DIR
        self._device_name = device_name
        self._writer_timeout_s = writer_timeout_s
        self._lock = threading.Lock()
        self._active: Optional[_ActiveRecording] = None

    @property
    def recording(self) -> bool:
        return self._active is not None

    def start_recording(self) -> RecordingHandle:
        with self._lock:
            if self._active is not None:
                raise RecordingError("Already recording")
            if sd is None:
                raise RecordingError("sounddevice is not installed")
            try:
                self._cache_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise RecordingError(f"mkdir: {exc}") from exc

            try:
                device = self._resolve_device()
            except Exception as exc:
                raise RecordingError(f"query devices: {exc}") from exc

            path = self._cache_dir / f"dictation-{uuid.uuid4()}.wav"
            active = _ActiveRecording(
                handle=RecordingHandle(token=path.stem, audio_path=str(path)),
                chunks=Queue(),
            )
            active.writer = threading.Thread(
                target=self._write_wav, args=(active,), daemon=True
            )
            active.writer.start()

            blocksize = int(self.sample_rate * (self.chunk_ms / 1000.0))
            try:
                active.stream = sd.InputStream(
                    device=device,
                    samplerate=self.sample_rate,
                    channels=self.channels,
                    dtype="int16",
                    blocksize=blocksize,
                    callback=self._on_audio,
                )
                self._active = active
                active.stream.start()
            except Exception as exc:
                self._active = None
                active.chunks.put(None)
                active.writer.join(timeout=self._writer_timeout_s)
                path.unlink(missing_ok=True)
                raise RecordingError(f"build stream: {exc}") from exc

            logger.info("Recording started: %s (device=%s)", path, device or "default")
            return active.handle

    def stop_recording(self, handle: RecordingHandle) -> RecordingResult:
        with self._lock:
            active = self._active
            if active is None or active.handle != handle:
                raise RecordingError("Not recording")
            self._active = None

        try:
            active.stream.stop()
            active.stream.close()
        except Exception as exc:
            logger.warning("Closing input stream failed: %s", exc)
        active.chunks.put(None)
        if active.writer is not None:
            active.writer.join(timeout=self._writer_timeout_s)

        if active.error is not None:
            raise RecordingError(f"writer failed: {active.error}")
        path = Path(handle.audio_path)
        if not path.exists():
            raise RecordingError(f"Recorded file does not exist: {path}")
        if path.stat().st_size == 0 or active.frames_written == 0:
            raise RecordingError("Recorded file is empty")

        duration_ms = active.frames_written * 1000 // self.sample_rate
        logger.info("Recording finished: %d frames, %d ms", active.frames_written, duration_ms)
        return RecordingResult(
            audio_path=str(path),
            sample_rate_hz=self.sample_rate,
            duration_ms=duration_ms,
        )

    def list_input_devices(self) -> list[tuple[str, bool]]:
        if sd is None:
            return []
        default_index = sd.default.device[0]
        devices = []
        for index, info in enumerate(sd.query_devices()):
            if info.get("max_input_channels", 0) > 0:
                devices.append((str(info["name"]), index == default_index))
        return devices

    def _resolve_device(self) -> Optional[int]:
        name = self._device_name() if self._device_name else ""
        if not name:
            return None
        for index, info in enumerate(sd.query_devices()):
            if info.get("name") == name and info.get("max_input_channels", 0) > 0:
                return index
        logger.warning("Input device %r not found, falling back to default", name)
        return None

    def _on_audio(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        active = self._active
        if active is None or np is None:
            return
        if status:
            logger.debug("Input stream status: %s", status)
        active.chunks.put_nowait(np.asarray(indata, dtype=np.int16).tobytes())

    def _write_wav(self, active: _ActiveRecording) -> None:
        frame_bytes = SAMPLE_WIDTH * self.channels
        try:
            with wave.open(active.handle.audio_path, "wb") as wf:
                wf.setnchannels(self.channels)
                wf.setsampwidth(SAMPLE_WIDTH)
                wf.setframerate(self.sample_rate)
                while True:
                    chunk = active.chunks.get()
                    if chunk is None:
                        break
                    wf.writeframes(chunk)
                    active.frames_written += len(chunk) // frame_bytes
        except Exception as exc:
            logger.error("WAV writer failed: %s", exc)
            active.error = exc
