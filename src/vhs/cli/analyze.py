"""vhs analyze / restore commands."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from vhs.cli.output import fail, output_json
from vhs.core.config import VHSConfig, get_config
from vhs.core.exceptions import VHSError
from vhs.db.models import AnalysisResult
from vhs.pipeline.orchestrator import TaskOutcome
from vhs.studio import Studio


async def _analyze(config: VHSConfig, url: str) -> TaskOutcome[AnalysisResult]:
    async with Studio(config) as studio:
        studio.controller.select(url)
        return await studio.orchestrator.analyze(url)


async def _restore(config: VHSConfig, url: str) -> AnalysisResult | None:
    async with Studio(config) as studio:
        studio.controller.select(url)
        return await studio.controller.restore_from_authority(url)


def register(app: typer.Typer) -> None:
    @app.command("analyze")
    def analyze_cmd(
        url: str = typer.Argument(..., help="Video URL"),
        db: str = typer.Option(None, "--db", help="Database path override"),
    ) -> None:
        """Run analysis (transcript, summary, recommendations) for a video."""
        config = get_config(db_path=Path(db) if db else None)

        try:
            outcome = asyncio.run(_analyze(config, url))
        except VHSError as e:
            fail(str(e))

        if not outcome.ok:
            fail(f"Analysis failed: {outcome.message}")
        output_json({"url": url, "analysis": outcome.value.model_dump(mode="json")})

    @app.command("restore")
    def restore_cmd(
        url: str = typer.Argument(..., help="Video URL"),
        db: str = typer.Option(None, "--db", help="Database path override"),
    ) -> None:
        """Fetch the analysis the server already stored for a video."""
        config = get_config(db_path=Path(db) if db else None)

        analysis = asyncio.run(_restore(config, url))
        output_json({
            "url": url,
            "found": analysis is not None,
            "analysis": analysis.model_dump(mode="json") if analysis else None,
        })
