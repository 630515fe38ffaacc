"""
pkgsearch Exception Hierarchy.

All custom exceptions inherit from PkgSearchError for unified error handling.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class PkgSearchError(Exception):
    """Base exception for pkgsearch errors.

    Attributes:
        message: Human-readable error description
        context: Additional context for debugging
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self._log_error()

    def _log_error(self) -> None:
        """Log the error creation at debug level.

        Callers should log at appropriate level when handling the exception.
        """
        logger.debug(
            f"{self.__class__.__name__}: {self.message}",
            extra={"error_context": self.context},
        )

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} [{ctx}]"
        return self.message


class ConfigError(PkgSearchError):
    """Raised for configuration errors.

    Examples:
        - Malformed config file
        - Invalid log level
        - Non-http index URL
    """


class TransportError(PkgSearchError):
    """Raised when the index could not be fetched or read.

    Fatal for the run: the selection model moves to the failed phase.

    Attributes:
        url: The index URL that was requested
        status_code: HTTP status, when a response was received
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if url:
            ctx["url"] = url
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message, ctx)
        self.url = url
        self.status_code = status_code


class DecodeError(PkgSearchError):
    """Raised for a single malformed index line.

    Recovered locally by the loader: the line is skipped.
    """

    def __init__(
        self,
        message: str,
        line: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if line is not None:
            ctx["line"] = line if len(line) <= 200 else line[:197] + "..."
        super().__init__(message, ctx)
        self.line = line


class SinkError(PkgSearchError):
    """Base for clipboard (copy sink) failures.

    Attributes:
        command: Name of the clipboard utility
    """

    def __init__(
        self,
        message: str,
        command: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if command:
            ctx["command"] = command
        super().__init__(message, ctx)
        self.command = command


class SinkUnavailable(SinkError):
    """Raised when no clipboard utility can be run.

    Examples:
        - Unsupported operating system
        - Utility not installed (exit code 127 or missing executable)
    """


class SinkExecutionError(SinkError):
    """Raised when the clipboard utility ran but exited non-zero.

    Attributes:
        returncode: The utility's exit code
        stderr: Captured standard error
    """

    def __init__(
        self,
        message: str,
        command: str | None = None,
        returncode: int | None = None,
        stderr: str = "",
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if returncode is not None:
            ctx["returncode"] = returncode
        super().__init__(message, command=command, context=ctx)
        self.returncode = returncode
        self.stderr = stderr
