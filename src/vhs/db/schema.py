"""Cache database migrations, tracked in SQLite's user_version."""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

MIGRATIONS: list[str] = [
    # 1: one row per video key
    """
    CREATE TABLE IF NOT EXISTS cache_entries (
        key TEXT PRIMARY KEY,
        payload TEXT NOT NULL,
        updated_at TEXT DEFAULT (datetime('now'))
    );
    """,
]


def get_schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def migrate(conn: sqlite3.Connection) -> int:
    """Apply migrations newer than the database's version. Returns the final version."""
    current = get_schema_version(conn)

    for version, sql in enumerate(MIGRATIONS[current:], start=current + 1):
        conn.executescript(sql)
        conn.execute(f"PRAGMA user_version = {version}")
        conn.commit()
        logger.info("Cache schema migrated to version %d", version)

    return len(MIGRATIONS)
