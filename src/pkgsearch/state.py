"""Selection model: query, ranked matches, cursor and viewport.

The model is a pure transition function ``update(state, event)`` returning
the next state plus the commands (effects) the event loop must run. It never
performs I/O and never raises on an event, whatever the phase.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Union

from .matcher import match
from .models import Entry, Match, Phase
from .store import EntryStore

DEFAULT_VIEWPORT_SIZE = 20
QUIT_MESSAGE = "Exiting Go Package Search."


# =========================================================================
# Events
# =========================================================================


@dataclass(frozen=True)
class LoadCompleted:
    entries: tuple[Entry, ...]


@dataclass(frozen=True)
class LoadFailed:
    error: str


@dataclass(frozen=True)
class KeyTyped:
    char: str


@dataclass(frozen=True)
class KeyBackspace:
    pass


@dataclass(frozen=True)
class KeyUp:
    pass


@dataclass(frozen=True)
class KeyDown:
    pass


@dataclass(frozen=True)
class KeyConfirm:
    pass


@dataclass(frozen=True)
class KeyQuit:
    pass


@dataclass(frozen=True)
class CopyCompleted:
    text: str


@dataclass(frozen=True)
class CopyFailed:
    error: str


@dataclass(frozen=True)
class ViewportResized:
    size: int


Event = Union[
    LoadCompleted,
    LoadFailed,
    KeyTyped,
    KeyBackspace,
    KeyUp,
    KeyDown,
    KeyConfirm,
    KeyQuit,
    CopyCompleted,
    CopyFailed,
    ViewportResized,
]


# =========================================================================
# Commands
# =========================================================================


@dataclass(frozen=True)
class LoadTask:
    """Fetch the index."""


@dataclass(frozen=True)
class CopyTask:
    """Copy ``text`` to the clipboard."""

    text: str


@dataclass(frozen=True)
class Exit:
    """Terminate the event loop."""


Command = Union[LoadTask, CopyTask, Exit]


# =========================================================================
# State
# =========================================================================


@dataclass(frozen=True)
class SelectionState:
    """Complete selection state."""

    store: EntryStore = field(default_factory=EntryStore)
    query: str = ""
    matches: tuple[Match, ...] = ()
    selected_index: int = -1
    viewport_offset: int = 0
    viewport_size: int = DEFAULT_VIEWPORT_SIZE
    phase: Phase = Phase.LOADING

    # Final message shown once the run ends
    message: str = ""
    error: str | None = None
    copy_pending: bool = False


def initial_state(viewport_size: int = DEFAULT_VIEWPORT_SIZE) -> SelectionState:
    return SelectionState(viewport_size=max(1, viewport_size))


def clamp_viewport(selected_index: int, viewport_offset: int, viewport_size: int) -> int:
    """Return the offset that keeps ``selected_index`` visible with minimal scroll."""
    if selected_index < 0:
        return 0
    if selected_index < viewport_offset:
        return selected_index
    if selected_index >= viewport_offset + viewport_size:
        return selected_index - viewport_size + 1
    return viewport_offset


def _with_viewport(state: SelectionState) -> SelectionState:
    offset = clamp_viewport(state.selected_index, state.viewport_offset, state.viewport_size)
    if offset == state.viewport_offset:
        return state
    return replace(state, viewport_offset=offset)


def _refilter(state: SelectionState, query: str) -> SelectionState:
    matches = tuple(match(query, state.store.texts()))
    selected = state.selected_index
    if not matches:
        selected = -1
    elif not 0 <= selected < len(matches):
        selected = 0
    return _with_viewport(
        replace(state, query=query, matches=matches, selected_index=selected)
    )


def _move(state: SelectionState, direction: int) -> SelectionState:
    count = len(state.matches)
    selected = (state.selected_index + direction) % count
    return _with_viewport(replace(state, selected_index=selected))


def selected_entry(state: SelectionState) -> Entry | None:
    """Entry under the cursor, if any."""
    if not 0 <= state.selected_index < len(state.matches):
        return None
    entry_index = state.matches[state.selected_index].entry_index
    if not 0 <= entry_index < len(state.store):
        return None
    return state.store[entry_index]


def visible_matches(state: SelectionState) -> list[tuple[int, Match]]:
    """(absolute index, match) pairs inside the viewport window."""
    end = min(state.viewport_offset + state.viewport_size, len(state.matches))
    return [(i, state.matches[i]) for i in range(state.viewport_offset, end)]


def exit_code(state: SelectionState) -> int:
    """0 for a clean quit or a successful copy, 1 on failure."""
    if state.phase == Phase.FAILED or state.error is not None:
        return 1
    return 0


def update(state: SelectionState, event: Event) -> tuple[SelectionState, list[Command]]:
    """Apply ``event`` to ``state``.

    Events that are not valid in the current phase leave the state unchanged.
    """
    phase = state.phase

    if isinstance(event, ViewportResized):
        size = max(1, event.size)
        if size == state.viewport_size:
            return state, []
        return _with_viewport(replace(state, viewport_size=size)), []

    if isinstance(event, LoadCompleted):
        if phase != Phase.LOADING:
            return state, []
        loaded = replace(state, store=EntryStore(event.entries), phase=Phase.READY)
        return _refilter(loaded, state.query), []

    if isinstance(event, LoadFailed):
        if phase != Phase.LOADING:
            return state, []
        failed = replace(
            state,
            phase=Phase.FAILED,
            error=event.error,
            message=f"Error: {event.error}",
        )
        return failed, [Exit()]

    if isinstance(event, KeyQuit):
        if phase.is_terminal:
            return state, []
        return replace(state, phase=Phase.QUITTING, message=QUIT_MESSAGE), [Exit()]

    if isinstance(event, (CopyCompleted, CopyFailed)):
        if phase != Phase.QUITTING or not state.copy_pending:
            return state, []
        if isinstance(event, CopyFailed):
            done = replace(
                state,
                copy_pending=False,
                error=event.error,
                message=f"Error: {event.error}",
            )
        else:
            done = replace(state, copy_pending=False)
        return done, [Exit()]

    # Everything below is a keypress that only applies while ready.
    if phase != Phase.READY:
        return state, []

    if isinstance(event, KeyTyped):
        if not event.char:
            return state, []
        return _refilter(state, state.query + event.char), []

    if isinstance(event, KeyBackspace):
        if not state.query:
            return state, []
        return _refilter(state, state.query[:-1]), []

    if isinstance(event, (KeyUp, KeyDown)):
        if not state.matches:
            return state, []
        return _move(state, -1 if isinstance(event, KeyUp) else 1), []

    if isinstance(event, KeyConfirm):
        entry = selected_entry(state)
        if entry is None:
            return state, []
        confirmed = replace(
            state,
            phase=Phase.QUITTING,
            copy_pending=True,
            message=f"'{entry.id}' copied to clipboard!",
        )
        return confirmed, [CopyTask(text=entry.id)]

    return state, []
