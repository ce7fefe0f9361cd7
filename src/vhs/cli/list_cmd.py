"""vhs list command."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from vhs.cli.output import fail, output_json
from vhs.core.config import VHSConfig, get_config
from vhs.core.exceptions import VHSError
from vhs.db.models import VideoListItem
from vhs.studio import Studio


async def _list(config: VHSConfig) -> list[VideoListItem]:
    async with Studio(config) as studio:
        return await studio.controller.list_videos(config.user_id)


def register(app: typer.Typer) -> None:
    @app.command("list")
    def list_cmd(
        db: str = typer.Option(None, "--db", help="Database path override"),
    ) -> None:
        """List recently uploaded videos."""
        config = get_config(db_path=Path(db) if db else None)

        try:
            videos = asyncio.run(_list(config))
        except VHSError as e:
            fail(str(e))
        output_json({
            "videos": [v.model_dump(mode="json") for v in videos],
            "total": len(videos),
        })
