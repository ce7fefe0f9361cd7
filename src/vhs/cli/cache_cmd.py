"""vhs cache command: inspect the durable conversation cache."""

from __future__ import annotations

from pathlib import Path

import typer

from vhs.cli.output import output_json
from vhs.core.config import get_config
from vhs.core.constants import VIDEO_KEY_PREFIX
from vhs.db.repository import SessionRepository
from vhs.utils.hashing import derive_video_key

cache_app = typer.Typer()


@cache_app.command("key")
def cache_key(
    url: str = typer.Argument(..., help="Video URL"),
) -> None:
    """Show the cache key derived for a video URL."""
    output_json({"url": url, "video_key": derive_video_key(url)})


@cache_app.command("keys")
def cache_keys(
    db: str = typer.Option(None, "--db", help="Database path override"),
) -> None:
    """List stored conversation keys (expired entries included)."""
    config = get_config(db_path=Path(db) if db else None)
    repo = SessionRepository(config.db_path, ttl_ms=config.session_ttl_ms)

    try:
        keys = repo.keys()
        output_json({"keys": keys, "total": len(keys)})
    finally:
        repo.close()


@cache_app.command("purge")
def cache_purge(
    db: str = typer.Option(None, "--db", help="Database path override"),
) -> None:
    """Delete every stored conversation."""
    config = get_config(db_path=Path(db) if db else None)
    repo = SessionRepository(config.db_path, ttl_ms=config.session_ttl_ms)

    try:
        output_json({"purged": repo.purge_prefix(VIDEO_KEY_PREFIX)})
    finally:
        repo.close()
