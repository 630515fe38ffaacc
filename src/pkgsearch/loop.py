"""Single-threaded cooperative event loop driving the selection model."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .state import (
    Event,
    Exit,
    KeyQuit,
    LoadTask,
    SelectionState,
    initial_state,
    update,
)
from .tasks import Copier, Loader, TaskRunner

logger = logging.getLogger(__name__)


class EventLoop:
    """Pulls events in arrival order, applies them and re-renders.

    Key handlers and background tasks only ever call :meth:`post`; the state
    is replaced exclusively inside :meth:`run`.
    """

    def __init__(
        self,
        loader: Loader,
        copier: Copier,
        *,
        state: SelectionState | None = None,
        on_render: Callable[[SelectionState], None] | None = None,
    ) -> None:
        self.state = state or initial_state()
        self.on_render = on_render
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self.runner = TaskRunner(self.post, loader, copier)
        self.processed = 0

    def post(self, event: Event) -> None:
        """Enqueue an event; never blocks."""
        self._queue.put_nowait(event)

    def stop(self) -> None:
        """Request a quit through the normal event path."""
        self.post(KeyQuit())

    def _render(self) -> None:
        if self.on_render:
            self.on_render(self.state)

    async def run(self) -> SelectionState:
        """Run until a transition asks to exit. Returns the final state."""
        self.runner.submit(LoadTask())
        self._render()

        try:
            running = True
            while running:
                event = await self._queue.get()
                self.state, commands = update(self.state, event)
                self.processed += 1
                logger.debug(
                    "Event %s -> phase=%s matches=%d selected=%d",
                    type(event).__name__,
                    self.state.phase.value,
                    len(self.state.matches),
                    self.state.selected_index,
                )
                for command in commands:
                    if isinstance(command, Exit):
                        running = False
                    else:
                        self.runner.submit(command)
                self._render()
        finally:
            # a load still in flight after quit is simply discarded
            await self.runner.cancel_all()

        return self.state
