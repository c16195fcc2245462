"""Tests for the Textual driver's key translation (workdeck.dashboard.app)."""

import pytest

from workdeck.dashboard.app import translate_key


class TestTranslateKey:
    @pytest.mark.parametrize("key, character, expected", [
        ("a", "a", "a"),
        ("N", "N", "N"),
        ("slash", "/", "/"),
        ("space", " ", " "),
        ("escape", None, "esc"),
        ("pageup", None, "pgup"),
        ("pagedown", None, "pgdown"),
        ("enter", "\r", "enter"),
        ("tab", "\t", "tab"),
        ("shift+tab", None, "shift+tab"),
        ("backspace", "\x7f", "backspace"),
        ("ctrl+c", "\x03", "ctrl+c"),
        ("up", None, "up"),
        ("home", None, "home"),
    ])
    def test_translation(self, key, character, expected):
        assert translate_key(key, character) == expected

    def test_unhandled_key(self):
        assert translate_key("f5", None) is None
