#!/usr/bin/env python3

from __future__ import annotations
import asyncio
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from shared.config import ConfigError, ClientConfig, load_config
from shared.log import configure_root_logging, get_logger
from .session import EXIT_FAILURE, EXIT_OK, run_session

app = typer.Typer(help="Duplex TCP chat client")
console = Console(stderr=True)
logger = get_logger(__name__)


class Framing(str, Enum):
    chunk = "chunk"
    line = "line"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def _resolve(config_path: Optional[Path], **overrides) -> ClientConfig:
    try:
        return load_config(config_path, **overrides)
    except ConfigError as e:
        console.print(f"[red]Invalid configuration[/]: {e}")
        raise typer.Exit(code=EXIT_FAILURE)


@app.command()
def connect(
    server: Optional[str] = typer.Option(None, "--server", "-s", help="host:port of the chat server (env CHAT_SERVER)"),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Login name; prompted for if omitted"),
    chunk_size: Optional[int] = typer.Option(None, help="Maximum bytes per receive"),
    framing: Optional[Framing] = typer.Option(None, help="'chunk' shows each read as-is, 'line' splits on newlines"),
    timestamps: Optional[bool] = typer.Option(None, "--timestamps/--no-timestamps", help="Prefix received messages with the local time"),
    connect_timeout: Optional[float] = typer.Option(None, help="Seconds to wait for the TCP connect"),
    log_level: Optional[LogLevel] = typer.Option(None, case_sensitive=False, help="Log verbosity (env CHAT_LOG_LEVEL)"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML settings file"),
):
    """Connect to the chat server and chat until /quit or disconnect."""
    config = _resolve(
        config_path,
        server=server,
        username=username,
        chunk_size=chunk_size,
        framing=framing.value if framing else None,
        timestamps=timestamps,
        connect_timeout=connect_timeout,
        log_level=log_level.value if log_level else None,
    )
    configure_root_logging(config.log_level, config.log_file)
    logger.debug("Effective configuration: %s", config)

    try:
        code = asyncio.run(run_session(config))
    except KeyboardInterrupt:
        code = EXIT_OK
    raise typer.Exit(code=code)


@app.command("config")
def show_config(
    server: Optional[str] = typer.Option(None, "--server", "-s", help="host:port of the chat server"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML settings file"),
):
    """Print the effective configuration and exit."""
    config = _resolve(config_path, server=server)
    table = Table(title="Chat client configuration")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in asdict(config).items():
        table.add_row(key, repr(value))
    Console().print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
