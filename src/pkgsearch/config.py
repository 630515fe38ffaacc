"""Configuration management for pkgsearch."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from pkgsearch.exceptions import ConfigError

DEFAULT_INDEX_URL = "https://index.golang.org/index"

_LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}
_LOG_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


def _parse_log_level(level: str) -> int:
    normalized = level.strip().lower()
    if normalized in _LOG_LEVELS:
        return _LOG_LEVELS[normalized]
    valid = ", ".join(sorted({k for k in _LOG_LEVELS if k != "warn"}))
    raise ValueError(f"Invalid log level: {level}. Valid: {valid}")


def _coerce_log_levels(levels: dict[str, str]) -> dict[str, str]:
    normalized: dict[str, str] = {}
    for name, level in levels.items():
        _parse_log_level(level)
        normalized[name] = level.strip().lower()
    return normalized


class _StructuredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _LOG_RECORD_KEYS
        }
        for key, value in extras.items():
            if isinstance(value, (str, int, float, bool)) or value is None:
                payload[key] = value
            else:
                payload[key] = str(value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = record.stack_info
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(config: "SearchConfig") -> None:
    """Send structured JSON logs to stderr or ``config.log_file``.

    The root logger gets ``log_level``; loggers named in ``log_levels`` get
    their own level and still propagate to the single root handler.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler: logging.Handler
    if config.log_file:
        handler = logging.FileHandler(config.log_file)
    else:
        handler = logging.StreamHandler()
    handler.setLevel(logging.NOTSET)
    handler.setFormatter(_StructuredFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(_parse_log_level(config.log_level))

    for name, level in config.log_levels.items():
        logging.getLogger(name).setLevel(_parse_log_level(level))


class SearchConfig(BaseModel):
    """Main configuration for pkgsearch."""

    # Index provider
    index_url: str = Field(default=DEFAULT_INDEX_URL, description="Go module index URL")
    index_since: datetime | None = Field(
        default=None,
        description="Only list modules published at or after this time",
    )
    index_limit: int | None = Field(
        default=None,
        ge=1,
        le=2000,
        description="Maximum number of index records to request",
    )
    timeout: float = Field(default=30.0, ge=1.0, description="HTTP timeout (seconds)")

    # Display
    page_size: int = Field(default=20, ge=1, description="Initial number of visible rows")
    chrome_rows: int = Field(
        default=10,
        ge=0,
        description="Terminal rows reserved for the search line and status bar",
    )
    letter_shortcuts: bool = Field(
        default=True,
        description="Treat q/j/k as quit/down/up instead of query characters",
    )

    # Copy sink
    clipboard_command: list[str] | None = Field(
        default=None,
        description="Override the clipboard command (argv list, text on stdin)",
    )

    # Logging
    log_level: str = Field(default="error", description="Log level")
    log_levels: dict[str, str] = Field(
        default_factory=dict,
        description="Per-component log levels (e.g., {'pkgsearch.index': 'debug'})",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (structured JSON)",
    )

    @field_validator("index_url")
    @classmethod
    def _validate_index_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("index_url must be an http(s) URL")
        return value

    @field_validator("clipboard_command")
    @classmethod
    def _validate_clipboard_command(cls, value: list[str] | None) -> list[str] | None:
        if value is not None and (not value or not value[0].strip()):
            raise ValueError("clipboard_command must name an executable")
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        _parse_log_level(value)
        return value.strip().lower()

    @field_validator("log_levels")
    @classmethod
    def _validate_log_levels(cls, value: dict[str, str]) -> dict[str, str]:
        return _coerce_log_levels(value)

    @classmethod
    def from_file(cls, path: str | Path, **overrides: Any) -> "SearchConfig":
        """Load configuration from TOML file, then apply keyword overrides."""
        import tomllib

        path = Path(path)
        data: dict[str, Any] = {}
        if path.exists():
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                raise ConfigError(f"Cannot read config file: {e}", {"path": str(path)}) from e

        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}", {"path": str(path)}) from e

    @classmethod
    def default_path(cls) -> Path:
        """Get default config file path."""
        return Path.home() / ".config" / "pkgsearch" / "config.toml"

    def index_params(self) -> dict[str, str]:
        """Query parameters for the index request."""
        params: dict[str, str] = {}
        if self.index_since is not None:
            since = self.index_since
            if since.tzinfo is None:
                since = since.replace(tzinfo=timezone.utc)
            params["since"] = since.isoformat().replace("+00:00", "Z")
        if self.index_limit is not None:
            params["limit"] = str(self.index_limit)
        return params
