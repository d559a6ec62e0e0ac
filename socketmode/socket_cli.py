#!/usr/bin/env python3

from __future__ import annotations
import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from shared.log import configure_root_logging, get_logger
from socketmode.config import Settings, load_settings
from socketmode.errors import SocketModeError
from socketmode.handshake import open_connection
from socketmode.responses import DemoResponseBuilder
from socketmode.ws_client import SocketModeSession

app = typer.Typer(help="Slack Socket Mode client")
console = Console()
logger = get_logger(__name__)


def _settings(config: Optional[Path], api_url: Optional[str], log_level: Optional[str]) -> Settings:
    settings = load_settings(config, api_url=api_url, log_level=log_level)
    configure_root_logging(settings.log_level)
    return settings


@app.command("open")
def open_(
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
    api_url: Optional[str] = typer.Option(None, help="apps.connections.open endpoint"),
    log_level: Optional[str] = typer.Option(None, help="DEBUG, INFO, WARNING or ERROR"),
):
    """Call apps.connections.open and print the ticket."""
    try:
        settings = _settings(config, api_url, log_level)
        ticket = asyncio.run(open_connection(settings.app_token(), api_url=settings.api_url))
    except SocketModeError as e:
        console.print(f"[red]{escape(str(e))}[/]")
        raise typer.Exit(code=1)
    console.print(json.dumps({"ok": ticket.ok, "url": ticket.url}, indent=2))


@app.command()
def run(
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
    api_url: Optional[str] = typer.Option(None, help="apps.connections.open endpoint"),
    log_level: Optional[str] = typer.Option(None, help="DEBUG, INFO, WARNING or ERROR"),
):
    """Open one Socket Mode connection and acknowledge envelopes until it ends."""

    async def main_loop(settings: Settings) -> Optional[str]:
        ticket = await open_connection(settings.app_token(), api_url=settings.api_url)
        console.print(f"[bold green]Socket Mode connection opened[/] {ticket.endpoint().host}")
        session = SocketModeSession(
            ticket,
            DemoResponseBuilder(settings.response),
            ping_interval=settings.ping_interval,
            ping_timeout=settings.ping_timeout,
            max_size=settings.max_size,
        )
        return await session.run()

    try:
        settings = _settings(config, api_url, log_level)
        reason = asyncio.run(main_loop(settings))
    except SocketModeError as e:
        logger.error(str(e))
        console.print(f"[red]{escape(str(e))}[/]")
        raise typer.Exit(code=1)

    if reason is None:
        console.print("[dim]Connection closed by peer[/]")
    else:
        console.print(f"[yellow]Disconnected[/]: {escape(reason)}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
