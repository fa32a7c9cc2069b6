"""Simple JSON-based settings store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from errors import SettingsLoadError, SettingsSaveError
from models import DEFAULT_HOTKEY, DEFAULT_LANGUAGE, Provider, Settings

logger = logging.getLogger(__name__)

APP_DIR = Path.home() / ".config" / "quickdictate"


class JsonSettingsStore:
    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or APP_DIR / "settings.json"

    @property
    def path(self) -> Path:
        return self._path

    def load_settings(self) -> Settings:
        data = self._read_all()
        return Settings(
            provider=Provider.parse(data.get("provider", Provider.OPENAI.value)),
            credentials={
                Provider.OPENAI: str(data.get("openai_api_key") or ""),
                Provider.GOOGLE: str(data.get("google_api_key") or ""),
            },
            language_code=str(data.get("google_language") or DEFAULT_LANGUAGE),
            input_device_name=str(data.get("input_device_name") or ""),
            panel_visible=bool(data.get("panel_visible", True)),
            hotkey=str(data.get("hotkey") or DEFAULT_HOTKEY),
        )

    def save_settings(self, settings: Settings) -> None:
        data = {
            "provider": settings.provider.value,
            "openai_api_key": settings.credentials.get(Provider.OPENAI, ""),
            "google_api_key": settings.credentials.get(Provider.GOOGLE, ""),
            "google_language": settings.language_code,
            "input_device_name": settings.input_device_name,
            "panel_visible": settings.panel_visible,
            "hotkey": settings.hotkey,
        }
        self._write_all(data)

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise SettingsLoadError(f"parse settings: {exc}") from exc
        if not isinstance(data, dict):
            raise SettingsLoadError("parse settings: expected a JSON object")
        return data

    def _write_all(self, data: dict) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            raise SettingsSaveError(f"write settings: {exc}") from exc
        logger.info("Settings saved to %s", self._path)
