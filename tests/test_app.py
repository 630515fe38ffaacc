"""Tests for the terminal app wiring (no real terminal needed)."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from prompt_toolkit.application import create_app_session
from prompt_toolkit.data_structures import Size
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from pkgsearch.app import SearchApp
from pkgsearch.clipboard import ClipboardCommand
from pkgsearch.config import SearchConfig
from pkgsearch.loop import EventLoop
from pkgsearch.models import Entry, Phase
from pkgsearch.render import LOADING_TEXT
from pkgsearch.state import ViewportResized


def _terminal(rows: int, columns: int = 80) -> MagicMock:
    terminal = MagicMock()
    terminal.output.get_size.return_value = Size(rows=rows, columns=columns)
    return terminal


class TestSearchApp:
    def test_builds_keybindings_and_layout(self) -> None:
        """Smoke test: the app constructs without invalid key bindings."""
        app = SearchApp()
        kb = app.keymap.build_prompt_toolkit_bindings(lambda event: None)
        layout = app._build_layout()

        assert kb is not None
        assert layout is not None

    def test_frame_before_run_shows_loading(self) -> None:
        frame = SearchApp()._get_frame()
        assert LOADING_TEXT in frame.value

    def test_keymap_follows_config(self) -> None:
        app = SearchApp(config=SearchConfig(letter_shortcuts=False))
        assert app.keymap.letter_shortcuts is False

    @pytest.mark.asyncio
    async def test_resize_posted_once_per_height(self) -> None:
        app = SearchApp(config=SearchConfig(chrome_rows=10))
        app._loop = EventLoop(AsyncMock(), AsyncMock())

        app._check_size(_terminal(30))
        app._check_size(_terminal(30))
        app._check_size(_terminal(15))

        queue = app._loop._queue
        assert queue.get_nowait() == ViewportResized(size=20)
        assert queue.get_nowait() == ViewportResized(size=5)
        assert queue.empty()

    @pytest.mark.asyncio
    async def test_load_uses_config(self) -> None:
        config = SearchConfig(index_url="http://localhost:9000/index", index_limit=5, timeout=3)
        entries = [Entry("foo/bar")]
        with patch("pkgsearch.app.fetch_index", AsyncMock(return_value=entries)) as fetch:
            result = await SearchApp(config=config)._load()

        assert result == entries
        fetch.assert_awaited_once_with(
            "http://localhost:9000/index", timeout=3.0, params={"limit": "5"}
        )

    @pytest.mark.asyncio
    async def test_copy_uses_override_command(self) -> None:
        config = SearchConfig(clipboard_command=["wl-copy"])
        with patch("pkgsearch.app.copy_text", AsyncMock()) as copy:
            await SearchApp(config=config)._copy("foo/bar")

        copy.assert_awaited_once_with("foo/bar", ClipboardCommand("wl-copy", ("wl-copy",)))

    @pytest.mark.asyncio
    async def test_run_returns_exit_code(self) -> None:
        """A load failure ends the run even while the UI is still up."""
        from pkgsearch.exceptions import TransportError

        async def fake_run_async(self):
            await asyncio.sleep(60)

        console = MagicMock()
        app = SearchApp(console=console)
        with (
            create_pipe_input() as pipe,
            create_app_session(input=pipe, output=DummyOutput()),
            patch(
                "pkgsearch.app.fetch_index",
                AsyncMock(side_effect=TransportError("failed to fetch Go index: refused")),
            ),
            patch("pkgsearch.app.Application.run_async", fake_run_async),
        ):
            code = await asyncio.wait_for(app.run(), timeout=2)

        assert code == 1
        printed = console.print.call_args.args[0]
        assert printed.plain == "Error: failed to fetch Go index: refused"

    @pytest.mark.asyncio
    async def test_typed_keys_select_and_copy(self) -> None:
        """Keys from the terminal filter, confirm, copy and exit cleanly."""
        entries = [Entry("foo/bar", "v1.0.0"), Entry("foo/baz", "v0.2.0"), Entry("qux")]
        console = MagicMock()
        app = SearchApp(console=console)

        with (
            create_pipe_input() as pipe,
            create_app_session(input=pipe, output=DummyOutput()),
            patch("pkgsearch.app.fetch_index", AsyncMock(return_value=entries)),
            patch("pkgsearch.app.copy_text", AsyncMock()) as copy,
        ):
            run_task = asyncio.create_task(app.run())
            while app.state.phase != Phase.READY:
                await asyncio.sleep(0.01)
            pipe.send_text("baz\r")
            code = await asyncio.wait_for(run_task, timeout=2)

        assert code == 0
        assert copy.await_args.args[0] == "foo/baz"
        printed = console.print.call_args.args[0]
        assert printed.plain == "'foo/baz' copied to clipboard!"
