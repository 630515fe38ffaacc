"""Tests for key to event translation."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from pkgsearch.keymap import DEFAULT_BINDINGS, Action, KeymapManager
from pkgsearch.state import (
    KeyBackspace,
    KeyConfirm,
    KeyDown,
    KeyQuit,
    KeyTyped,
    KeyUp,
)


class TestKeymap:
    """Tests for KeymapManager."""

    def test_default_bindings_cover_actions(self) -> None:
        """Every picker action has at least one binding."""
        assert {b.action for b in DEFAULT_BINDINGS} == set(Action)

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("up", KeyUp()),
            ("down", KeyDown()),
            ("enter", KeyConfirm()),
            ("backspace", KeyBackspace()),
            ("c-c", KeyQuit()),
            ("k", KeyUp()),
            ("j", KeyDown()),
            ("q", KeyQuit()),
            ("a", KeyTyped("a")),
            ("/", KeyTyped("/")),
        ],
    )
    def test_key_to_event(self, key, expected) -> None:
        assert KeymapManager().key_to_event(key) == expected

    def test_letters_typed_without_shortcuts(self) -> None:
        """With letter shortcuts off, q/j/k are query characters."""
        keymap = KeymapManager(letter_shortcuts=False)
        assert keymap.key_to_event("q") == KeyTyped("q")
        assert keymap.key_to_event("j") == KeyTyped("j")
        assert keymap.key_to_event("k") == KeyTyped("k")
        assert keymap.key_to_event("c-c") == KeyQuit()

    def test_unbound_keys_ignored(self) -> None:
        keymap = KeymapManager()
        assert keymap.key_to_event("tab") is None
        assert keymap.key_to_event("\x1b") is None
        assert keymap.key_to_event("<any>", "") is None

    def test_help_text(self) -> None:
        """Help groups keys per action."""
        help_items = dict(
            (desc, keys) for keys, desc in KeymapManager().get_help_text()
        )
        assert help_items["Move selection up"] == "Up / K"
        assert help_items["Quit"] == "Ctrl+C / Q"
        assert help_items["Copy path and quit"] == "Enter"

    def test_help_text_without_letters(self) -> None:
        help_items = dict(
            (desc, keys)
            for keys, desc in KeymapManager(letter_shortcuts=False).get_help_text()
        )
        assert help_items["Quit"] == "Ctrl+C"

    def test_prompt_toolkit_bindings(self) -> None:
        """Named keys and typed characters both reach ``post``."""
        from prompt_toolkit.keys import Keys

        posted = []
        kb = KeymapManager().build_prompt_toolkit_bindings(posted.append)

        up = kb.get_bindings_for_keys((Keys.Up,))
        assert up
        up[-1].handler(SimpleNamespace(data=""))

        typed = kb.get_bindings_for_keys(("x",))
        assert typed
        typed[-1].handler(SimpleNamespace(data="x"))

        assert posted == [KeyUp(), KeyTyped("x")]
