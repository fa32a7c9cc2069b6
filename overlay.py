"""Floating panel showing the dictation phase and status message."""

from __future__ import annotations

try:
    from PySide6.QtCore import Qt
    from PySide6.QtWidgets import QApplication, QLabel, QWidget, QVBoxLayout
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QApplication = None  # type: ignore
    QLabel = object  # type: ignore
    QWidget = object  # type: ignore
    QVBoxLayout = object  # type: ignore

PANEL_STYLE = "background: rgba(0,0,0,190); border-radius: 12px;"
MESSAGE_COLOR = "#DDDDDD"
ERROR_COLOR = "#FF6B6B"
HINT_COLOR = "#FF8800"
HOTKEY_HINT = "Press {hotkey} to toggle"


class OverlayWindow(QWidget):
    def __init__(self, hotkey: str = "") -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowFlags(
            Qt.WindowStaysOnTopHint | Qt.FramelessWindowHint | Qt.Tool
        )
        self.setAttribute(Qt.WA_TranslucentBackground, True)
        self.setFixedWidth(420)
        self.setStyleSheet(PANEL_STYLE)

        self._phase_label = QLabel("IDLE")
        self._phase_label.setStyleSheet(
            "color: white; font-size: 22px; font-weight: bold; padding: 12px 16px 0 16px;"
        )
        self._message_label = QLabel("")
        self._message_label.setWordWrap(True)
        self._hint_label = QLabel(HOTKEY_HINT.format(hotkey=hotkey) if hotkey else "")
        self._hint_label.setStyleSheet("color: #999999; font-size: 11px; padding: 0 16px;")
        self._warning_label = QLabel("")
        self._warning_label.setWordWrap(True)
        self._warning_label.setStyleSheet(
            f"color: {HINT_COLOR}; font-size: 11px; padding: 0 16px 12px 16px;"
        )
        self._set_message_color(MESSAGE_COLOR)

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._phase_label)
        layout.addWidget(self._message_label)
        layout.addWidget(self._hint_label)
        layout.addWidget(self._warning_label)
        self.setLayout(layout)

    def _bottom_right(self, margin: int = 64) -> None:
        """Position the window near the bottom-right corner of the primary screen."""
        if QApplication is None:
            return
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        geom = screen.availableGeometry()
        self.adjustSize()
        x = max(geom.x() + geom.width() - self.width() - margin, 0)
        y = max(geom.y() + geom.height() - self.height() - margin, 0)
        self.move(x, y)

    def show_panel(self) -> None:
        self._bottom_right()
        self.show()

    def show_phase(self, phase: str, message: str) -> None:
        self._phase_label.setText(phase)
        self._set_message_color(ERROR_COLOR if phase == "ERROR" else MESSAGE_COLOR)
        self._message_label.setText(message)
        self._message_label.setVisible(bool(message))
        self.adjustSize()

    def set_credential_warning(self, text: str) -> None:
        """Show or clear the missing API key hint."""
        self._warning_label.setText(f"⚠️ {text}" if text else "")
        self.adjustSize()

    def _set_message_color(self, color: str) -> None:
        self._message_label.setStyleSheet(
            f"color: {color}; font-size: 14px; padding: 4px 16px;"
        )
