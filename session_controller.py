"""State-machine based session orchestration."""

from __future__ import annotations

import logging
import threading
from functools import partial
from pathlib import Path
from typing import Callable, Optional

from errors import (
    EMPTY_TRANSCRIPT,
    MISSING_CREDENTIAL,
    NO_TEXT_TRANSCRIBED,
    PASTE_FAILED,
    PROVIDER_FAILED,
    RECORDING_FAILED,
    MissingCredentialError,
    PasteError,
    ProviderError,
    RecordingError,
)
from interfaces import PasteService, Recorder
from models import CycleOutcome, OutcomeKind, Phase, RecordingHandle
from provider_resolver import ProviderResolver
from recovery import DONE_RECOVERY_MS, ERROR_RECOVERY_MS, RecoveryScheduler
from settings_cache import SettingsCache
from toggle_gate import ToggleGate

logger = logging.getLogger(__name__)

StateCallback = Callable[[Phase, Phase], None]
MessageCallback = Callable[[Phase, str], None]
ErrorCallback = Callable[[str, str], None]
Executor = Callable[[Callable[[], None]], None]

IN_FLIGHT = (Phase.TRANSCRIBING, Phase.PASTING)
TERMINAL = (Phase.DONE, Phase.ERROR)


def _spawn(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, daemon=True).start()


def _failed(code: str, message: str) -> CycleOutcome:
    return CycleOutcome(kind=OutcomeKind.FAILED, code=code, message=message)


def _remove_audio(path: str) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Removing recording %s failed: %s", path, exc)


class SessionController:
    """Owns the single dictation session and drives it one toggle at a time.

    ``toggle`` runs on whichever thread delivers the hotkey. Starting a
    recording happens inline; the stop/transcribe/paste pipeline is handed to
    ``executor`` so later toggles can be seen (and ignored) while it runs.
    """

    def __init__(
        self,
        recorder: Recorder,
        resolver: ProviderResolver,
        paste_service: PasteService,
        settings_cache: SettingsCache,
        gate: Optional[ToggleGate] = None,
        scheduler: Optional[RecoveryScheduler] = None,
        executor: Optional[Executor] = None,
        on_state_change: Optional[StateCallback] = None,
        on_message: Optional[MessageCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        discard_audio: bool = True,
    ) -> None:
        self._recorder = recorder
        self._resolver = resolver
        self._paste_service = paste_service
        self._cache = settings_cache
        self._gate = gate or ToggleGate()
        self._scheduler = scheduler or RecoveryScheduler()
        self._executor = executor or _spawn
        self._on_state_change = on_state_change
        self._on_message = on_message
        self._on_error = on_error
        self._discard_audio = discard_audio

        self._lock = threading.RLock()
        self._phase = Phase.IDLE
        self._message = ""
        self._handle: Optional[RecordingHandle] = None
        # Bumped by every accepted toggle and cancel; recovery only applies to
        # the cycle that armed it.
        self._cycle = 0

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def message(self) -> str:
        return self._message

    @property
    def recording_handle(self) -> Optional[RecordingHandle]:
        return self._handle

    def toggle(self, now: Optional[int] = None) -> bool:
        """Handle one hotkey press. Returns True if it started a transition."""
        if not self._gate.accept(now):
            logger.debug("Ignoring duplicate toggle within debounce window")
            return False

        with self._lock:
            if self._phase in IN_FLIGHT:
                logger.info("Toggle ignored while %s", self._phase.value)
                return False
            self._cycle += 1
            self._scheduler.cancel_pending()
            if self._phase != Phase.RECORDING:
                self._start_recording()
                return True
            handle = self._handle
            self._transition(Phase.TRANSCRIBING, "Transcribing...")

        self._executor(lambda: self._finish_cycle(handle))
        return True

    def notify_settings_changed(self) -> None:
        self._cache.invalidate()

    def cancel_session(self, reason: str) -> None:
        """Abandon a recording or a terminal phase; in-flight work is left alone."""
        with self._lock:
            if self._phase in IN_FLIGHT:
                return
            self._cycle += 1
            self._scheduler.cancel_pending()
            if self._phase == Phase.IDLE:
                return
            logger.info("Cancelling session: %s", reason)
            handle, self._handle = self._handle, None
            if handle is not None:
                self._safe_stop_recorder(handle)
            self._transition(Phase.IDLE, "")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _start_recording(self) -> None:
        self._cache.refresh_if_stale()
        try:
            handle = self._recorder.start_recording()
        except RecordingError as exc:
            self._conclude(_failed(RECORDING_FAILED, exc.message))
            return
        except Exception as exc:
            logger.exception("Recorder crashed on start")
            self._conclude(_failed(RECORDING_FAILED, str(exc)))
            return
        self._handle = handle
        self._transition(Phase.RECORDING, "Recording...")

    def _finish_cycle(self, handle: Optional[RecordingHandle]) -> None:
        try:
            outcome = self._run_pipeline(handle)
        except Exception as exc:
            logger.exception("Dictation pipeline crashed")
            outcome = _failed(PROVIDER_FAILED, str(exc) or type(exc).__name__)
        if handle is not None and self._discard_audio:
            _remove_audio(handle.audio_path)
        with self._lock:
            self._conclude(outcome)

    def _run_pipeline(self, handle: Optional[RecordingHandle]) -> CycleOutcome:
        if handle is None:
            return _failed(RECORDING_FAILED, "Not recording")
        try:
            recording = self._recorder.stop_recording(handle)
        except RecordingError as exc:
            return _failed(RECORDING_FAILED, exc.message)
        except Exception as exc:
            logger.exception("Recorder crashed on stop")
            return _failed(RECORDING_FAILED, str(exc))
        finally:
            with self._lock:
                self._handle = None
        logger.info(
            "Recording stopped: %s (%d Hz, %d ms)",
            recording.audio_path,
            recording.sample_rate_hz,
            recording.duration_ms,
        )

        try:
            resolved = self._resolver.resolve(self._cache.current())
        except MissingCredentialError as exc:
            return _failed(MISSING_CREDENTIAL, exc.message)

        try:
            transcriber = self._resolver.transcriber_for(resolved.provider)
            result = transcriber.transcribe(
                recording.audio_path,
                resolved.credential,
                resolved.language_code,
            )
        except ProviderError as exc:
            return _failed(PROVIDER_FAILED, exc.message)
        except Exception as exc:
            logger.exception("%s transcriber crashed", resolved.provider.value)
            return _failed(PROVIDER_FAILED, str(exc))

        text = result.text or ""
        if not text.strip():
            return CycleOutcome(
                kind=OutcomeKind.EMPTY_TRANSCRIPT,
                code=EMPTY_TRANSCRIPT,
                message=NO_TEXT_TRANSCRIBED,
            )

        with self._lock:
            self._transition(Phase.PASTING, "Pasting...")
        try:
            pasted = self._paste_service.paste_text(text)
        except PasteError as exc:
            return CycleOutcome(OutcomeKind.COPIED, text=text, code=PASTE_FAILED, message=exc.message)
        except Exception as exc:
            logger.exception("Paste service crashed")
            return CycleOutcome(OutcomeKind.COPIED, text=text, code=PASTE_FAILED, message=str(exc))
        if pasted.pasted:
            return CycleOutcome(OutcomeKind.PASTED, text=text)
        return CycleOutcome(OutcomeKind.COPIED, text=text, code=PASTE_FAILED, message=pasted.reason)

    def _conclude(self, outcome: CycleOutcome) -> None:
        kind = outcome.kind
        if kind == OutcomeKind.PASTED:
            self._transition(Phase.DONE, f'Pasted: "{outcome.text}"')
            self._scheduler.arm(DONE_RECOVERY_MS, partial(self._recover, self._cycle))
        elif kind == OutcomeKind.COPIED:
            logger.warning("Auto paste failed (%s), text left in clipboard", outcome.message)
            self._transition(Phase.DONE, f'Copied to clipboard: "{outcome.text}"')
            self._scheduler.arm(DONE_RECOVERY_MS, partial(self._recover, self._cycle))
        elif kind == OutcomeKind.EMPTY_TRANSCRIPT:
            logger.warning("Transcription returned no text")
            self._transition(Phase.ERROR, NO_TEXT_TRANSCRIBED)
            self._emit_error(outcome.code, outcome.message)
            self._scheduler.arm(ERROR_RECOVERY_MS, partial(self._recover, self._cycle))
        else:
            logger.warning("Dictation failed [%s]: %s", outcome.code, outcome.message)
            self._transition(Phase.ERROR, outcome.message)
            self._emit_error(outcome.code, outcome.message)
            self._scheduler.arm(ERROR_RECOVERY_MS, partial(self._recover, self._cycle))

    def _recover(self, cycle: int) -> None:
        with self._lock:
            if cycle != self._cycle:
                logger.debug("Dropping recovery armed by an earlier cycle")
                return
            if self._phase in TERMINAL:
                self._transition(Phase.IDLE, "")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)

    def _safe_stop_recorder(self, handle: RecordingHandle) -> None:
        try:
            self._recorder.stop_recording(handle)
        except Exception as exc:
            logger.warning("Discarding recording failed: %s", exc)
        if self._discard_audio:
            _remove_audio(handle.audio_path)

    def _transition(self, to_phase: Phase, message: str) -> None:
        from_phase = self._phase
        if from_phase == to_phase and message == self._message:
            return
        self._phase = to_phase
        self._message = message
        if from_phase != to_phase:
            logger.info("Phase %s -> %s", from_phase.value, to_phase.value)
            if self._on_state_change:
                self._on_state_change(from_phase, to_phase)
        if self._on_message:
            self._on_message(to_phase, message)
