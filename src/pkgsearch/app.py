"""Full-screen terminal picker for pkgsearch."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import HSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from rich.console import Console

from .clipboard import clipboard_command, copy_text
from .config import SearchConfig
from .index import fetch_index
from .keymap import KeymapManager
from .loop import EventLoop
from .models import Entry
from .render import render_final_message, render_frame
from .state import SelectionState, ViewportResized, exit_code, initial_state

logger = logging.getLogger(__name__)


@dataclass
class SearchApp:
    """
    Interactive module picker.

    Integrates:
    - prompt_toolkit for key input and screen updates
    - Rich for rendering frames
    - EventLoop for state transitions and background tasks
    """

    config: SearchConfig = field(default_factory=SearchConfig)
    console: Console = field(default_factory=Console)

    # Internal state
    _loop: EventLoop | None = None
    _app: Application | None = None
    _last_rows: int | None = None

    def __post_init__(self) -> None:
        self.keymap = KeymapManager(letter_shortcuts=self.config.letter_shortcuts)

    @property
    def state(self) -> SelectionState:
        if self._loop is None:
            return initial_state(self.config.page_size)
        return self._loop.state

    # =========================================================================
    # Effects
    # =========================================================================

    async def _load(self) -> list[Entry]:
        return await fetch_index(
            self.config.index_url,
            timeout=self.config.timeout,
            params=self.config.index_params(),
        )

    async def _copy(self, text: str) -> None:
        command = clipboard_command(override=self.config.clipboard_command)
        await copy_text(text, command)

    # =========================================================================
    # Rendering
    # =========================================================================

    def _on_render(self, state: SelectionState) -> None:
        """Called after every state change."""
        if self._app:
            self._app.invalidate()

    def _get_frame(self) -> ANSI:
        width = None
        if self._app:
            width = self._app.output.get_size().columns
        return ANSI(render_frame(self.state, width=width))

    def _check_size(self, app: Application) -> None:
        """Post a resize event when the terminal height changed."""
        rows = app.output.get_size().rows
        if rows == self._last_rows or self._loop is None:
            return
        self._last_rows = rows
        self._loop.post(ViewportResized(size=rows - self.config.chrome_rows))

    def _build_layout(self) -> Layout:
        body = Window(
            content=FormattedTextControl(self._get_frame),
            wrap_lines=False,
        )
        return Layout(HSplit([body]))

    # =========================================================================
    # Main Loop
    # =========================================================================

    async def run(self) -> int:
        """Run the picker. Returns the process exit code."""
        self._loop = EventLoop(
            self._load,
            self._copy,
            state=initial_state(self.config.page_size),
            on_render=self._on_render,
        )
        self._app = Application(
            layout=self._build_layout(),
            key_bindings=self.keymap.build_prompt_toolkit_bindings(self._loop.post),
            full_screen=True,
            before_render=self._check_size,
        )

        loop = self._loop
        ui_task = asyncio.create_task(self._app.run_async())
        # If the terminal goes away first, quit through the normal event path.
        ui_task.add_done_callback(lambda _task: loop.stop())
        try:
            final = await loop.run()
        finally:
            if not ui_task.done():
                if self._app.is_running:
                    self._app.exit()
                else:
                    ui_task.cancel()
            try:
                await ui_task
            except (EOFError, KeyboardInterrupt, asyncio.CancelledError):
                logger.debug("Terminal UI ended early")

        self.console.print(render_final_message(final))
        return exit_code(final)


async def run_search(config: SearchConfig | None = None) -> int:
    """Run the pkgsearch picker.

    Args:
        config: SearchConfig instance (optional)
    """
    app = SearchApp(config=config or SearchConfig())
    return await app.run()
