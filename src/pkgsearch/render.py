"""Rich rendering helpers: project selection state onto terminal lines."""

import io
from collections.abc import Sequence

from rich.console import Console, Group, RenderableType
from rich.text import Text

from pkgsearch.models import Entry, Match, Phase
from pkgsearch.state import SelectionState, visible_matches

__all__ = [
    "Theme",
    "render_to_ansi",
    "highlight",
    "render_entry_line",
    "render_status_line",
    "render_final_message",
    "build_frame",
    "render_frame",
]

LOADING_TEXT = "Loading Go packages from index.golang.org/index... Please wait."
NO_MATCHES_TEXT = "No packages found matching your query."
NO_ENTRIES_TEXT = "No packages loaded."


class Theme:
    """Colors for the picker."""

    PRIMARY = "#007bff"
    ITEM = "#888888"
    SELECTED = "bold #007bff on #e0f2ff"
    MATCH = "#ff00ff"
    VERSION = "#a0a0a0"
    SUCCESS = "bold #00ff00"
    ERROR = "#ff0000"
    MUTED = "dim"


def render_to_ansi(
    renderable: RenderableType,
    *,
    width: int | None = None,
    force_terminal: bool = True,
) -> str:
    """
    Render a Rich renderable to ANSI escape codes.

    prompt_toolkit displays the result through its ``ANSI`` formatted text.
    """
    console = Console(
        file=io.StringIO(),
        width=width or 120,
        force_terminal=force_terminal,
        color_system="truecolor",
        legacy_windows=False,
    )
    console.print(renderable, end="")
    return console.file.getvalue()


def highlight(
    text: str,
    positions: Sequence[int],
    style: str = Theme.MATCH,
    base_style: str = "",
) -> Text:
    """Style the characters of ``text`` at ``positions`` on top of ``base_style``."""
    result = Text(text, style=base_style)
    for pos in positions:
        if 0 <= pos < len(text):
            result.stylize(style, pos, pos + 1)
    return result


def render_entry_line(entry: Entry, match: Match, selected: bool = False) -> Text:
    """One result row: marker, highlighted path, optional version."""
    line = Text()
    line.append(" ▸ " if selected else "   ", style=f"bold {Theme.PRIMARY}" if selected else "")
    base_style = Theme.SELECTED if selected else Theme.ITEM
    line.append_text(highlight(entry.id, match.positions, base_style=base_style))
    if entry.label:
        line.append(f" ({entry.label})", style=Theme.VERSION)
    return line


def render_status_line(shown: int, total: int) -> Text:
    text = Text()
    text.append(f"Found {shown} packages (filtered from {total}). ", style=Theme.PRIMARY)
    text.append("Use ↑↓ to navigate, Enter to copy path and quit, Q or Ctrl+C to quit.", style=Theme.MUTED)
    return text


def render_final_message(state: SelectionState) -> Text:
    """Last line printed when the run ends."""
    if state.error is not None:
        return Text(state.message or f"Error: {state.error}", style=Theme.ERROR)
    return Text(state.message, style=Theme.SUCCESS)


def build_frame(state: SelectionState) -> Group:
    """Build the renderable for the current state."""
    if state.phase.is_terminal:
        return Group(render_final_message(state))

    if state.phase == Phase.LOADING:
        return Group(Text(LOADING_TEXT, style=Theme.PRIMARY))

    elements: list[RenderableType] = []

    header = Text("Search: ")
    header.append(state.query)
    header.append("|", style=Theme.PRIMARY)
    elements.append(header)
    elements.append(Text())

    if not state.matches:
        elements.append(Text(NO_MATCHES_TEXT if state.query else NO_ENTRIES_TEXT))
    else:
        for i, m in visible_matches(state):
            entry = state.store[m.entry_index]
            elements.append(render_entry_line(entry, m, selected=i == state.selected_index))

    elements.append(Text())
    elements.append(render_status_line(len(state.matches), len(state.store)))
    return Group(*elements)


def render_frame(state: SelectionState, width: int | None = None) -> str:
    """Render the current state as ANSI text."""
    return render_to_ansi(build_frame(state), width=width)
