from __future__ import annotations

from unittest.mock import MagicMock

import pytest

import hotkey
from hotkey import GlobalHotkeyAdapter


def test_start_raises_without_pynput(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(hotkey, "keyboard", None)

    with pytest.raises(RuntimeError, match="pynput is not installed"):
        GlobalHotkeyAdapter().start(lambda: None)


def test_registers_combination_and_forwards_activation(monkeypatch) -> None:  # noqa: ANN001
    fake_keyboard = MagicMock()
    monkeypatch.setattr(hotkey, "keyboard", fake_keyboard)
    toggles: list[int] = []

    adapter = GlobalHotkeyAdapter(hotkey="<ctrl>+<shift>+t")
    adapter.start(lambda: toggles.append(1))

    mapping = fake_keyboard.GlobalHotKeys.call_args.args[0]
    assert list(mapping) == ["<ctrl>+<shift>+t"]
    fake_keyboard.GlobalHotKeys.return_value.start.assert_called_once()

    mapping["<ctrl>+<shift>+t"]()
    assert toggles == [1]


def test_start_twice_registers_once(monkeypatch) -> None:  # noqa: ANN001
    fake_keyboard = MagicMock()
    monkeypatch.setattr(hotkey, "keyboard", fake_keyboard)

    adapter = GlobalHotkeyAdapter()
    adapter.start(lambda: None)
    adapter.start(lambda: None)

    assert fake_keyboard.GlobalHotKeys.call_count == 1


def test_invalid_hotkey_raises_runtime_error(monkeypatch) -> None:  # noqa: ANN001
    fake_keyboard = MagicMock()
    fake_keyboard.GlobalHotKeys.side_effect = ValueError("bad key")
    monkeypatch.setattr(hotkey, "keyboard", fake_keyboard)

    with pytest.raises(RuntimeError, match="invalid hotkey"):
        GlobalHotkeyAdapter(hotkey="<nope>").start(lambda: None)


def test_stop_stops_listener(monkeypatch) -> None:  # noqa: ANN001
    fake_keyboard = MagicMock()
    monkeypatch.setattr(hotkey, "keyboard", fake_keyboard)

    adapter = GlobalHotkeyAdapter()
    adapter.start(lambda: None)
    adapter.stop()
    adapter.stop()

    fake_keyboard.GlobalHotKeys.return_value.stop.assert_called_once()
