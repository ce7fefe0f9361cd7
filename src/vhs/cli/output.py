"""Command output: JSON results on stdout, diagnostics on stderr."""

from __future__ import annotations

import json
from typing import NoReturn

import typer
from rich.console import Console

_stderr = Console(stderr=True, highlight=False)


def output_json(data: dict | list) -> None:
    """Write one JSON document to stdout."""
    typer.echo(json.dumps(data, default=str, ensure_ascii=False))


def output_text(text: str) -> None:
    typer.echo(text)


def warn(message: str) -> None:
    _stderr.print(f"[yellow]Warning:[/yellow] {message}")


def fail(message: str) -> NoReturn:
    """Report ``message`` on stderr and exit with status 1."""
    _stderr.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)
