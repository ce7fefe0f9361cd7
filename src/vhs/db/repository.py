"""Durable key/value tier for conversation sessions, with lazy TTL expiry."""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any, Callable

from vhs.core.constants import DEFAULT_DB_PATH, DEFAULT_SESSION_TTL_HOURS, MS_PER_HOUR
from vhs.core.exceptions import StorageError
from vhs.db.schema import migrate

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _open(path: Path) -> sqlite3.Connection:
    """Open and migrate the cache file, or an in-memory database if that fails."""
    conn = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(path), timeout=5.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        migrate(conn)
        return conn
    except (sqlite3.Error, OSError) as e:
        if conn is not None:
            conn.close()
        logger.warning("Durable cache at %s unusable, keeping sessions in memory only: %s", path, e)

    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    migrate(conn)
    return conn


class SessionRepository:
    """SQLite-backed store of ``{"stored_at": ms, "messages": value}`` records.

    Entries older than the TTL are treated as absent and deleted when read;
    there is no background sweep. Read and write failures never reach the
    caller: they are logged and the in-memory tier stays authoritative.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        *,
        ttl_ms: int = int(DEFAULT_SESSION_TTL_HOURS * MS_PER_HOUR),
        clock: Callable[[], int] = now_ms,
    ):
        self.conn = _open(db_path or DEFAULT_DB_PATH)
        self.ttl_ms = ttl_ms
        self.clock = clock

    def close(self) -> None:
        self.conn.close()

    # --- Raw access ---

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            cur = self.conn.execute(sql, params)
            self.conn.commit()
            return cur
        except sqlite3.Error as e:
            raise StorageError(f"Cache query failed: {e}") from e

    def peek(self, key: str) -> str | None:
        """Return the stored payload text for ``key`` ignoring TTL, or None."""
        row = self._execute(
            "SELECT payload FROM cache_entries WHERE key = ?", (key,)
        ).fetchone()
        return row["payload"] if row else None

    # --- Cache API ---

    def put(self, key: str, value: Any, now: int | None = None) -> None:
        """Overwrite ``key`` with ``value``. Failures are logged, never raised."""
        stored_at = self.clock() if now is None else now
        try:
            payload = json.dumps({"stored_at": stored_at, "messages": value})
            self._execute(
                """INSERT INTO cache_entries (key, payload, updated_at)
                   VALUES (?, ?, datetime('now'))
                   ON CONFLICT(key) DO UPDATE SET
                       payload = excluded.payload,
                       updated_at = excluded.updated_at""",
                (key, payload),
            )
        except (StorageError, TypeError, ValueError) as e:
            logger.warning("Durable cache write failed for %s: %s", key, e)

    def get(self, key: str, now: int | None = None) -> Any | None:
        """Return the value for ``key``, or None if missing, expired or corrupt.

        Expired and corrupt entries are evicted as a side effect.
        """
        try:
            raw = self.peek(key)
        except StorageError as e:
            logger.warning("Durable cache read failed for %s: %s", key, e)
            return None
        if raw is None:
            return None

        try:
            record = json.loads(raw)
            stored_at = int(record["stored_at"])
            value = record["messages"]
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Evicting corrupt cache entry %s: %s", key, e)
            self.delete(key)
            return None

        current = self.clock() if now is None else now
        if current - stored_at > self.ttl_ms:
            logger.info("Cache entry %s expired (stored_at=%d)", key, stored_at)
            self.delete(key)
            return None
        return value

    def delete(self, key: str) -> None:
        """Remove ``key``. Deleting a missing key is a no-op."""
        try:
            self._execute("DELETE FROM cache_entries WHERE key = ?", (key,))
        except StorageError as e:
            logger.warning("Durable cache delete failed for %s: %s", key, e)

    def purge_prefix(self, prefix: str) -> int:
        """Delete every entry whose key starts with ``prefix``. Returns the count."""
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        try:
            cur = self._execute(
                "DELETE FROM cache_entries WHERE key LIKE ? ESCAPE '\\'",
                (escaped + "%",),
            )
        except StorageError as e:
            logger.warning("Durable cache purge failed for %s*: %s", prefix, e)
            return 0
        return cur.rowcount

    def keys(self) -> list[str]:
        """All stored keys, expired or not."""
        try:
            rows = self._execute("SELECT key FROM cache_entries ORDER BY key").fetchall()
        except StorageError as e:
            logger.warning("Durable cache listing failed: %s", e)
            return []
        return [r["key"] for r in rows]
