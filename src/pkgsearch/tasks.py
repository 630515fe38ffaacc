"""Async task runner for the two long-running effects (load, copy).

Tasks never touch the selection state. Each one posts exactly one completion
event back to the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from .exceptions import PkgSearchError
from .models import Entry
from .state import (
    Command,
    CopyCompleted,
    CopyFailed,
    CopyTask,
    Event,
    LoadCompleted,
    LoadFailed,
    LoadTask,
)

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Sequence[Entry]]]
Copier = Callable[[str], Awaitable[None]]


def _describe(error: BaseException) -> str:
    if isinstance(error, PkgSearchError):
        return error.message
    return str(error) or error.__class__.__name__


class TaskRunner:
    """Runs load/copy commands as asyncio tasks and reports back via ``post``."""

    def __init__(
        self,
        post: Callable[[Event], None],
        loader: Loader,
        copier: Copier,
    ) -> None:
        self._post = post
        self._loader = loader
        self._copier = copier
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of tasks still running."""
        return sum(1 for task in self._tasks if not task.done())

    def submit(self, command: Command) -> asyncio.Task[None] | None:
        """Start the task for ``command``. Returns None for non-task commands."""
        if isinstance(command, LoadTask):
            coro = self._run_load()
            name = "pkgsearch-load"
        elif isinstance(command, CopyTask):
            coro = self._run_copy(command.text)
            name = "pkgsearch-copy"
        else:
            return None

        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_load(self) -> None:
        try:
            entries = await self._loader()
        except asyncio.CancelledError:
            logger.debug("Load task cancelled")
            raise
        except PkgSearchError as e:
            logger.error("Index load failed: %s", e)
            self._post(LoadFailed(error=_describe(e)))
        except Exception as e:  # Catch-all: any loader crash ends the run as a load failure
            logger.exception("Unexpected error while loading index")
            self._post(LoadFailed(error=_describe(e)))
        else:
            self._post(LoadCompleted(entries=tuple(entries)))

    async def _run_copy(self, text: str) -> None:
        try:
            await self._copier(text)
        except asyncio.CancelledError:
            logger.debug("Copy task cancelled")
            raise
        except PkgSearchError as e:
            logger.error("Copy to clipboard failed: %s", e)
            self._post(CopyFailed(error=_describe(e)))
        except Exception as e:  # Catch-all: report as a copy failure instead of crashing the UI
            logger.exception("Unexpected error while copying to clipboard")
            self._post(CopyFailed(error=_describe(e)))
        else:
            self._post(CopyCompleted(text=text))

    async def cancel_all(self) -> None:
        """Cancel unfinished tasks and wait for them to unwind."""
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
