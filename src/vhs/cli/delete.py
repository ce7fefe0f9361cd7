"""vhs delete command."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from vhs.cli.output import fail, output_json
from vhs.core.config import VHSConfig, get_config
from vhs.core.exceptions import VHSError
from vhs.studio import Studio
from vhs.utils.hashing import derive_video_key


async def _delete(config: VHSConfig, url: str, file_name: str | None) -> None:
    async with Studio(config) as studio:
        if file_name:
            await studio.controller.remove_video(url, file_name, config.user_id)
        else:
            studio.controller.delete(url)


def register(app: typer.Typer) -> None:
    @app.command("delete")
    def delete_cmd(
        url: str = typer.Argument(..., help="Video URL"),
        file_name: str = typer.Option(None, "--file-name", help="Also delete the uploaded file on the server"),
        db: str = typer.Option(None, "--db", help="Database path override"),
    ) -> None:
        """Delete cached state for a video (and optionally the server copy)."""
        config = get_config(db_path=Path(db) if db else None)

        try:
            asyncio.run(_delete(config, url, file_name))
        except VHSError as e:
            fail(str(e))
        output_json({
            "deleted": url,
            "video_key": derive_video_key(url),
            "remote": bool(file_name),
        })
