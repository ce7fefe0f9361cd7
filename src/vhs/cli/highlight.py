"""vhs highlight command."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from vhs.cli.output import fail, output_json
from vhs.core.config import VHSConfig, get_config
from vhs.core.constants import DEFAULT_HIGHLIGHT_COUNT, DEFAULT_HIGHLIGHT_DURATION_SEC
from vhs.core.exceptions import VHSError
from vhs.studio import Studio


async def _highlight(
    config: VHSConfig,
    url: str,
    focus: str,
    duration: int,
    count: int,
    mode: str,
    titles: bool,
) -> dict:
    async with Studio(config) as studio:
        studio.controller.select(url)
        # Segments, full text and recommended focus come from the stored analysis
        await studio.controller.restore_from_authority(url)

        outcome = await studio.orchestrator.generate_highlights(
            url, focus, duration, count, mode=mode
        )
        if not outcome.ok:
            raise VHSError(f"Highlight generation failed: {outcome.message}")

        results = []
        for i, item in enumerate(outcome.value.results, 1):
            entry = item.model_dump(mode="json")
            if titles:
                entry["title"] = await studio.orchestrator.suggest_title(item, focus, mode, index=i)
            results.append(entry)
        return {"url": url, "results": results, "total": len(results)}


def register(app: typer.Typer) -> None:
    @app.command("highlight")
    def highlight_cmd(
        url: str = typer.Argument(..., help="Video URL"),
        focus: str = typer.Option("", "--focus", "-f", help="Highlight focus (default: first recommendation)"),
        duration: int = typer.Option(DEFAULT_HIGHLIGHT_DURATION_SEC, "--duration", "-d", help="Clip length in seconds"),
        count: int = typer.Option(DEFAULT_HIGHLIGHT_COUNT, "--count", "-n", help="Number of highlights"),
        mode: str = typer.Option("text", "--mode", "-m", help="Scoring mode: text or voice"),
        titles: bool = typer.Option(False, "--titles", help="Suggest an export title for each highlight"),
        db: str = typer.Option(None, "--db", help="Database path override"),
    ) -> None:
        """Generate highlight clips for a video."""
        config = get_config(db_path=Path(db) if db else None)

        try:
            result = asyncio.run(_highlight(config, url, focus, duration, count, mode, titles))
        except VHSError as e:
            fail(str(e))
        output_json(result)
