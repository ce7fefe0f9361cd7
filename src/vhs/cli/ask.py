"""vhs ask / history commands."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from vhs.cli.output import fail, output_json, warn
from vhs.core.config import VHSConfig, get_config
from vhs.core.exceptions import VHSError
from vhs.studio import Studio


async def _ask(config: VHSConfig, url: str, question: str) -> dict:
    async with Studio(config) as studio:
        studio.controller.select(url)
        if not await studio.controller.restore_conversation(url):
            setup = await studio.orchestrator.setup_conversation(url)
            if not setup.ok:
                raise VHSError(f"Conversation setup failed: {setup.message}")

        outcome = await studio.orchestrator.ask_question(url, question)
        if not outcome.ok:
            raise VHSError(f"Question failed: {outcome.message}")
        return {
            "url": url,
            "answer": outcome.value.content,
            "answered_at": outcome.value.sent_at.isoformat(),
            "messages": len(studio.cache.get_session(url)),
        }


async def _history(config: VHSConfig, url: str) -> list[dict]:
    async with Studio(config) as studio:
        studio.controller.select(url)
        await studio.controller.restore_conversation(url)
        return [m.model_dump(mode="json") for m in studio.cache.get_session(url)]


def register(app: typer.Typer) -> None:
    @app.command("ask")
    def ask_cmd(
        url: str = typer.Argument(..., help="Video URL"),
        question: str = typer.Argument(..., help="Question about the video content"),
        db: str = typer.Option(None, "--db", help="Database path override"),
    ) -> None:
        """Ask a question about a video (RAG). Sets up the conversation if needed."""
        config = get_config(db_path=Path(db) if db else None)

        try:
            result = asyncio.run(_ask(config, url, question))
        except VHSError as e:
            fail(str(e))
        output_json(result)

    @app.command("history")
    def history_cmd(
        url: str = typer.Argument(..., help="Video URL"),
        db: str = typer.Option(None, "--db", help="Database path override"),
    ) -> None:
        """Show the conversation for a video (local cache first, then server)."""
        config = get_config(db_path=Path(db) if db else None)

        messages = asyncio.run(_history(config, url))
        if not messages:
            warn(f"No conversation found for {url}")
        output_json({"url": url, "messages": messages, "total": len(messages)})
