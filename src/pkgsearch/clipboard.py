"""System clipboard access through the platform's copy utility."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from .exceptions import SinkExecutionError, SinkUnavailable

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
EXIT_NOT_FOUND = 127


@dataclass(frozen=True)
class ClipboardCommand:
    """A clipboard utility invocation; the text goes to its stdin."""

    name: str
    argv: tuple[str, ...]


_PLATFORM_COMMANDS: dict[str, ClipboardCommand] = {
    "darwin": ClipboardCommand("pbcopy", ("pbcopy",)),
    "linux": ClipboardCommand("xclip", ("xclip", "-selection", "clipboard", "-i")),
    "win32": ClipboardCommand("clip", ("cmd", "/c", "clip")),
}


def clipboard_command(
    platform: str | None = None,
    override: Sequence[str] | None = None,
) -> ClipboardCommand:
    """Pick the clipboard utility for ``platform`` (defaults to ``sys.platform``).

    Raises:
        SinkUnavailable: No utility is known for the platform.
    """
    if override:
        return ClipboardCommand(override[0], tuple(override))

    platform = platform or sys.platform
    if platform.startswith("linux"):
        platform = "linux"
    command = _PLATFORM_COMMANDS.get(platform)
    if command is None:
        raise SinkUnavailable(f"unsupported operating system for clipboard: {platform}")
    return command


def _not_found(name: str, stderr: str) -> SinkUnavailable:
    return SinkUnavailable(
        f"clipboard command '{name}' not found. "
        f"Please ensure it's installed and in your PATH. (Stderr: {stderr})",
        command=name,
    )


async def copy_text(text: str, command: ClipboardCommand | None = None) -> None:
    """Write ``text`` to the clipboard and wait for the utility to finish.

    Raises:
        SinkUnavailable: The utility is missing or unsupported.
        SinkExecutionError: The utility exited with a non-zero status.
    """
    command = command or clipboard_command()
    logger.debug("Copying %d chars with %s", len(text), command.name)

    try:
        process = await asyncio.create_subprocess_exec(
            *command.argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise _not_found(command.name, str(e)) from e
    except PermissionError as e:
        raise SinkExecutionError(
            f"clipboard command '{command.name}' failed: {e}",
            command=command.name,
        ) from e

    try:
        # communicate() writes stdin and closes it before waiting
        _, stderr_bytes = await process.communicate(text.encode("utf-8"))
    except BaseException:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    stderr_text = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    returncode = process.returncode
    if returncode == 0:
        logger.info("Copied %r to clipboard with %s", text, command.name)
        return
    if returncode == EXIT_NOT_FOUND:
        raise _not_found(command.name, stderr_text)
    raise SinkExecutionError(
        f"clipboard command '{command.name}' exited with error {returncode} "
        f"(Stderr: {stderr_text})",
        command=command.name,
        returncode=returncode,
        stderr=stderr_text,
    )
