"""vhs config command: show or set configuration."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.prompt import Confirm, FloatPrompt, Prompt

from vhs.cli.output import output_json, output_text
from vhs.core.config import VHSConfig, get_config, save_config
from vhs.core.exceptions import APIError
from vhs.providers.http import HttpVideoService

config_app = typer.Typer()

_console = Console(stderr=True)


async def _probe(config: VHSConfig) -> int:
    service = HttpVideoService(config)
    try:
        return len(await service.list_videos(config.user_id))
    finally:
        await service.close()


def _validate_server(config_data: dict) -> bool:
    """List videos once to verify the server answers. Returns True on success."""
    temp_config = VHSConfig(
        api_base_url=config_data["api_base_url"],
        user_id=config_data["user_id"],
        request_timeout=10.0,
    )
    try:
        count = asyncio.run(_probe(temp_config))
    except APIError as e:
        _console.print(f"  [red]✗[/red] Server check failed: {e}")
        return False
    _console.print(f" [green]✓[/green] {count} video(s) found")
    return True


@config_app.command("show")
def config_show() -> None:
    """Show current configuration."""
    config = get_config()
    output_json({
        "api_base_url": config.api_base_url,
        "voice_api_base_url": config.voice_api_base_url,
        "user_id": config.user_id,
        "request_timeout": config.request_timeout,
        "session_ttl_hours": config.session_ttl_hours,
        "db_path": str(config.db_path),
        "log_level": config.log_level,
    })


@config_app.command("path")
def config_path() -> None:
    """Show path to the cache database file."""
    config = get_config()
    output_text(str(config.db_path))


@config_app.command("setup")
def config_setup() -> None:
    """Interactive setup wizard: point the client at an analysis server."""
    current = get_config()

    _console.print()
    _console.print("[bold]Configure the analysis server:[/bold]")
    _console.print()

    config_data = {
        "api_base_url": Prompt.ask(
            "  API base URL", console=_console, default=current.api_base_url
        ).strip(),
        "voice_api_base_url": Prompt.ask(
            "  Voice highlight API base URL", console=_console, default=current.voice_api_base_url
        ).strip(),
        "user_id": Prompt.ask("  User ID", console=_console, default=current.user_id).strip(),
        "session_ttl_hours": FloatPrompt.ask(
            "  Keep conversations locally for (hours)",
            console=_console,
            default=current.session_ttl_hours,
        ),
    }

    _console.print("  Checking server...", end="")
    if not _validate_server(config_data):
        if not Confirm.ask("  Save anyway?", console=_console, default=False):
            _console.print("  Setup cancelled.")
            raise typer.Exit(1)

    path = save_config(config_data)

    _console.print()
    _console.print(f"  [green]✓[/green] Config saved to {path}")
    _console.print("  [green]✓[/green] Ready! Try: [bold]vhs list[/bold]")
    _console.print()
