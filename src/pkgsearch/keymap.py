"""Keybinding definitions: terminal keys to selection events."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from pkgsearch.state import (
    Event,
    KeyBackspace,
    KeyConfirm,
    KeyDown,
    KeyQuit,
    KeyTyped,
    KeyUp,
)

# prompt_toolkit is optional at module load time
if TYPE_CHECKING:
    from prompt_toolkit.key_binding import KeyBindings


class Action(str, Enum):
    """Picker actions that can be bound to keys."""

    UP = "up"
    DOWN = "down"
    CONFIRM = "confirm"
    BACKSPACE = "backspace"
    QUIT = "quit"


@dataclass
class KeyBinding:
    """A single key binding."""

    keys: tuple[str, ...]
    action: Action
    description: str
    letter: bool = False  # only active with letter shortcuts enabled


DEFAULT_BINDINGS: list[KeyBinding] = [
    KeyBinding(keys=("up",), action=Action.UP, description="Move selection up"),
    KeyBinding(keys=("k",), action=Action.UP, description="Move selection up", letter=True),
    KeyBinding(keys=("down",), action=Action.DOWN, description="Move selection down"),
    KeyBinding(keys=("j",), action=Action.DOWN, description="Move selection down", letter=True),
    KeyBinding(keys=("enter",), action=Action.CONFIRM, description="Copy path and quit"),
    KeyBinding(keys=("backspace",), action=Action.BACKSPACE, description="Delete last query character"),
    KeyBinding(keys=("c-c",), action=Action.QUIT, description="Quit"),
    KeyBinding(keys=("q",), action=Action.QUIT, description="Quit", letter=True),
]

_ACTION_EVENTS: dict[Action, Callable[[], Event]] = {
    Action.UP: KeyUp,
    Action.DOWN: KeyDown,
    Action.CONFIRM: KeyConfirm,
    Action.BACKSPACE: KeyBackspace,
    Action.QUIT: KeyQuit,
}


class KeymapManager:
    """Resolves key presses to selection events."""

    def __init__(self, letter_shortcuts: bool = True) -> None:
        self.letter_shortcuts = letter_shortcuts
        self.bindings = [
            b for b in DEFAULT_BINDINGS if letter_shortcuts or not b.letter
        ]
        self._by_key: dict[str, Action] = {b.keys[0]: b.action for b in self.bindings}

    def key_to_event(self, key: str, data: str = "") -> Event | None:
        """Translate a key name (or typed character) into an event.

        ``key`` is a binding name such as ``"up"`` or ``"c-c"``; for printable
        input it is the character itself. Returns None for unbound keys.
        """
        action = self._by_key.get(key)
        if action is not None:
            return _ACTION_EVENTS[action]()

        char = data or key
        if len(char) == 1 and char.isprintable():
            return KeyTyped(char=char)
        return None

    def _format_keys(self, keys: tuple[str, ...]) -> str:
        """Format keys for display."""
        result = []
        for key in keys:
            if key.startswith("c-"):
                result.append(f"Ctrl+{key[2:].upper()}")
            elif len(key) == 1:
                result.append(key.upper())
            else:
                result.append(key.capitalize())
        return " ".join(result)

    def get_help_text(self) -> list[tuple[str, str]]:
        """Get list of (shortcuts, description) for help display."""
        grouped: dict[Action, list[str]] = {}
        descriptions: dict[Action, str] = {}
        for binding in self.bindings:
            grouped.setdefault(binding.action, []).append(self._format_keys(binding.keys))
            descriptions.setdefault(binding.action, binding.description)
        return [(" / ".join(keys), descriptions[action]) for action, keys in grouped.items()]

    def build_prompt_toolkit_bindings(
        self,
        post: Callable[[Event], None],
    ) -> "KeyBindings":
        """Build prompt_toolkit KeyBindings that post events."""
        # Import at runtime to avoid import errors when prompt_toolkit is not installed
        from prompt_toolkit.key_binding import KeyBindings

        kb = KeyBindings()

        named = sorted({b.keys[0] for b in self.bindings if len(b.keys[0]) > 1})
        for key in named:
            self._add_binding(kb, key, post)

        @kb.add("<any>")
        def handle_any(event) -> None:
            resolved = self.key_to_event(event.data, event.data)
            if resolved is not None:
                post(resolved)

        return kb

    def _add_binding(
        self,
        kb: "KeyBindings",
        key: str,
        post: Callable[[Event], None],
    ) -> None:
        @kb.add(key)
        def handler(event, key=key) -> None:
            resolved = self.key_to_event(key)
            if resolved is not None:
                post(resolved)
