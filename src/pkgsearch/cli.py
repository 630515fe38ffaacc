"""CLI interface for pkgsearch."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from pkgsearch import __version__
from pkgsearch.config import SearchConfig, configure_logging
from pkgsearch.exceptions import ConfigError

app = typer.Typer(
    name="pkgsearch",
    help="Fuzzy-search the Go module index and copy a module path to the clipboard.",
    no_args_is_help=False,
    add_completion=False,
)
console = Console(stderr=True)

EXIT_CONFIG_ERROR = 2


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"pkgsearch {__version__}")
        raise typer.Exit()


def build_config(
    config_path: Path | None,
    **overrides: object,
) -> SearchConfig:
    """Load the config file (if any) and apply command-line overrides."""
    path = config_path or SearchConfig.default_path()
    if config_path is not None and not config_path.exists():
        raise ConfigError("Config file not found", {"path": str(config_path)})
    return SearchConfig.from_file(path, **overrides)


@app.command()
def main(
    index_url: Annotated[
        str | None, typer.Option("--index-url", "-u", help="Go module index URL")
    ] = None,
    since: Annotated[
        datetime | None,
        typer.Option("--since", help="Only list modules published at or after this time"),
    ] = None,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", help="Maximum index records to request")
    ] = None,
    timeout: Annotated[
        float | None, typer.Option("--timeout", help="HTTP timeout in seconds")
    ] = None,
    config_path: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to a TOML config file")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Log level (debug, info, warning, error)")
    ] = None,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Write structured JSON logs to this file")
    ] = None,
    no_letter_shortcuts: Annotated[
        bool,
        typer.Option(
            "--no-letter-shortcuts",
            help="Type q/j/k into the query instead of quitting/navigating",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version", "-V", callback=_version_callback, is_eager=True, help="Show version"
        ),
    ] = False,
) -> None:
    """Start the interactive module search."""
    try:
        config = build_config(
            config_path,
            index_url=index_url,
            index_since=since,
            index_limit=limit,
            timeout=timeout,
            log_level=log_level,
            log_file=log_file,
            letter_shortcuts=False if no_letter_shortcuts else None,
        )
    except ConfigError as e:
        console.print(f"Error: {e}", style="red", markup=False, highlight=False)
        raise typer.Exit(EXIT_CONFIG_ERROR) from None

    configure_logging(config)

    from pkgsearch.app import run_search

    code = asyncio.run(run_search(config))
    raise typer.Exit(code)
