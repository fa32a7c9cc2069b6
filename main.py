"""Application entrypoint."""

from __future__ import annotations

import dataclasses
import logging
import sys

from auto_paste import ClipboardPasteService
from config import JsonSettingsStore
from errors import SettingsLoadError, SettingsSaveError
from hotkey import GlobalHotkeyAdapter
from logging_setup import setup_logging
from models import Phase, Provider, Settings
from overlay import OverlayWindow
from provider_resolver import ProviderResolver
from recorder import SoundDeviceRecorder
from session_controller import SessionController
from settings_cache import SettingsCache
from transcribers import GoogleTranscriber, OpenAITranscriber

try:
    from PySide6.QtCore import QObject, Signal, QSize
    from PySide6.QtGui import QAction, QIcon, QPixmap, QPainter, QColor, QBrush
    from PySide6.QtWidgets import QApplication, QInputDialog, QMenu, QMessageBox, QSystemTrayIcon
except Exception as exc:  # pragma: no cover
    raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")

logger = logging.getLogger(__name__)

GOOGLE_LANGUAGES = [
    "en-US", "en-GB", "yue-Hant-HK", "zh", "zh-CN", "zh-TW",
    "ja-JP", "ko-KR", "es-ES", "es-US", "fr-FR", "de-DE",
]
SYSTEM_DEFAULT_DEVICE = "System default"


def _create_icon(color: str = "#888888", size: int = 22) -> QIcon:
    """Generate a simple circular tray icon with the given color."""
    pixmap = QPixmap(QSize(size, size))
    pixmap.fill(QColor(0, 0, 0, 0))
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setBrush(QBrush(QColor(color)))
    painter.setPen(QColor(color))
    painter.drawEllipse(2, 2, size - 4, size - 4)
    painter.end()
    return QIcon(pixmap)


PHASE_ICONS = {
    Phase.IDLE: "#888888",
    Phase.RECORDING: "#FF4444",
    Phase.TRANSCRIBING: "#4488FF",
    Phase.PASTING: "#4488FF",
    Phase.DONE: "#44BB44",
    Phase.ERROR: "#FF8800",
}


class UIBridge(QObject):
    phase_signal = Signal(str, str)  # phase, message


class App:
    def __init__(self) -> None:
        self.app = QApplication(sys.argv)
        self.app.setQuitOnLastWindowClosed(False)
        self.store = JsonSettingsStore()
        self.cache = SettingsCache(self.store)
        try:
            self.cache.reload()
        except SettingsLoadError as exc:
            logger.warning("Using default settings: %s", exc)
        settings = self.cache.current()

        self.ui = UIBridge()
        self.ui.phase_signal.connect(self._on_phase_ui)
        self.overlay = OverlayWindow(hotkey=settings.hotkey)

        self.recorder = SoundDeviceRecorder(
            device_name=lambda: self.cache.current().input_device_name,
        )
        self.resolver = ProviderResolver(
            self.cache,
            {Provider.OPENAI: OpenAITranscriber(), Provider.GOOGLE: GoogleTranscriber()},
        )
        self.controller = SessionController(
            recorder=self.recorder,
            resolver=self.resolver,
            paste_service=ClipboardPasteService(),
            settings_cache=self.cache,
            on_message=self._on_message,
        )
        self.hotkey = GlobalHotkeyAdapter(hotkey=settings.hotkey)

        self.tray = QSystemTrayIcon()
        self.tray.setIcon(_create_icon(PHASE_ICONS[Phase.IDLE]))
        self.tray.setToolTip("QuickDictate — IDLE")
        self._setup_menu()
        self.tray.show()

        self._refresh_credential_warning()
        if settings.panel_visible:
            self.overlay.show_panel()

    def _setup_menu(self) -> None:
        menu = QMenu()
        entries = [
            ("Start/Stop Dictation", self.controller.toggle),
            ("Show Panel", self._show_panel),
            ("Hide Panel", self._hide_panel),
            (None, None),
            ("Provider", self._set_provider),
            ("Set OpenAI API Key", lambda: self._set_api_key(Provider.OPENAI)),
            ("Set Google API Key", lambda: self._set_api_key(Provider.GOOGLE)),
            ("Set Google Language", self._set_language),
            ("Select Microphone", self._set_input_device),
            (None, None),
            ("Quit", self.quit),
        ]
        for label, handler in entries:
            if label is None:
                menu.addSeparator()
                continue
            action = QAction(label, menu)
            action.triggered.connect(lambda _checked=False, h=handler: h())
            menu.addAction(action)
        self._menu = menu
        self.tray.setContextMenu(menu)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _save(self, settings: Settings) -> None:
        try:
            self.store.save_settings(settings)
        except SettingsSaveError as exc:
            QMessageBox.warning(None, "Settings", f"Failed to save settings: {exc}")
            return
        self.controller.notify_settings_changed()
        self._refresh_credential_warning()

    def _set_provider(self) -> None:
        current = self.cache.current()
        options = [p.value for p in Provider]
        value, ok = QInputDialog.getItem(
            None, "Provider", "Transcription provider", options,
            options.index(current.provider.value), False,
        )
        if not ok:
            return
        self._save(dataclasses.replace(current, provider=Provider.parse(value)))

    def _set_api_key(self, provider: Provider) -> None:
        value, ok = QInputDialog.getText(None, "API Key", f"{provider.label} API Key")
        if not ok:
            return
        current = self.cache.current()
        credentials = dict(current.credentials)
        credentials[provider] = value.strip()
        self._save(dataclasses.replace(current, credentials=credentials))

    def _set_language(self) -> None:
        current = self.cache.current()
        index = GOOGLE_LANGUAGES.index(current.language_code) if current.language_code in GOOGLE_LANGUAGES else 0
        value, ok = QInputDialog.getItem(
            None, "Language", "Google language code", GOOGLE_LANGUAGES, index, True,
        )
        if not ok:
            return
        self._save(dataclasses.replace(current, language_code=value.strip()))

    def _set_input_device(self) -> None:
        current = self.cache.current()
        names = [SYSTEM_DEFAULT_DEVICE] + [name for name, _ in self.recorder.list_input_devices()]
        index = names.index(current.input_device_name) if current.input_device_name in names else 0
        value, ok = QInputDialog.getItem(None, "Microphone", "Input device", names, index, False)
        if not ok:
            return
        device = "" if value == SYSTEM_DEFAULT_DEVICE else value
        self._save(dataclasses.replace(current, input_device_name=device))

    def _show_panel(self) -> None:
        self.overlay.show_panel()
        self._save(dataclasses.replace(self.cache.current(), panel_visible=True))

    def _hide_panel(self) -> None:
        self.overlay.hide()
        self._save(dataclasses.replace(self.cache.current(), panel_visible=False))

    def _refresh_credential_warning(self) -> None:
        settings = self.cache.refresh_if_stale()
        if self.resolver.is_configured(settings):
            self.overlay.set_credential_warning("")
        else:
            self.overlay.set_credential_warning(
                f"Please set your {settings.provider.label} API key in Settings"
            )

    # ------------------------------------------------------------------
    # Callbacks (called from worker threads → emit signals for UI thread)
    # ------------------------------------------------------------------

    def _on_message(self, phase: Phase, message: str) -> None:
        self.ui.phase_signal.emit(phase.value, message)

    def _on_phase_ui(self, phase: str, message: str) -> None:
        self.overlay.show_phase(phase, message)
        self.tray.setIcon(_create_icon(PHASE_ICONS[Phase(phase)]))
        self.tray.setToolTip(f"QuickDictate — {phase}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        try:
            self.hotkey.start(on_toggle=self.controller.toggle)
        except Exception as exc:
            logger.error("Hotkey disabled: %s", exc)
            self.overlay.show_phase(Phase.ERROR.value, f"Hotkey disabled: {exc}")
            self.overlay.show_panel()
        return self.app.exec()

    def quit(self) -> None:
        self.hotkey.stop()
        self.controller.cancel_session("app quit")
        self.app.quit()


def main() -> int:
    setup_logging()
    app = App()
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
