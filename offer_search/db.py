from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Optional


DB_FILE = "offer_cache.db"
SCHEMA_VERSION = 1

SCHEMA = """
CREATE TABLE IF NOT EXISTS result_cache (
    key       TEXT PRIMARY KEY,
    value     TEXT NOT NULL,
    stored_at TEXT NOT NULL
);
"""

logger = logging.getLogger(__name__)


class CacheError(RuntimeError):
    """Local result store could not be read or written."""


def migrate(db_path: str = DB_FILE) -> None:
    """Run pending migrations on the database."""
    logger.debug("Running migrations for %s", db_path)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_version "
            "(version INTEGER NOT NULL)"
        )
        cur = conn.execute("SELECT version FROM schema_version")
        row = cur.fetchone()
        current = row[0] if row else 0
        if current < SCHEMA_VERSION:
            logger.info("Applying schema version %s", SCHEMA_VERSION)
            conn.executescript(SCHEMA)
            if row:
                conn.execute(
                    "UPDATE schema_version SET version=?", (SCHEMA_VERSION,)
                )
            else:
                conn.execute(
                    "INSERT INTO schema_version(version) VALUES (?)",
                    (SCHEMA_VERSION,),
                )
            conn.commit()


def read_entry(key: str, db_path: str = DB_FILE) -> Optional[str]:
    """Return the raw value stored under *key* or ``None``."""
    with sqlite3.connect(db_path) as conn:
        row = conn.execute(
            "SELECT value FROM result_cache WHERE key=?", (key,)
        ).fetchone()
    return row[0] if row else None


def write_entry(key: str, value: str, db_path: str = DB_FILE) -> None:
    """Insert or replace the value stored under *key*."""
    stored_at = datetime.now(timezone.utc).isoformat()
    logger.debug("Writing cache entry %s", key)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO result_cache (key, value, stored_at)
            VALUES (?,?,?)
            ON CONFLICT(key)
            DO UPDATE SET value=excluded.value, stored_at=excluded.stored_at
            """,
            (key, value, stored_at),
        )
        conn.commit()


def count_entries(db_path: str = DB_FILE) -> int:
    with sqlite3.connect(db_path) as conn:
        return conn.execute("SELECT COUNT(*) FROM result_cache").fetchone()[0]


class SqliteStore:
    """Key-value store kept in a local SQLite file."""

    def __init__(self, db_path: str = DB_FILE) -> None:
        self.db_path = db_path
        # An unusable file leaves every get/set failing with CacheError.
        try:
            migrate(db_path=db_path)
        except sqlite3.Error as exc:
            logger.warning("Result cache at %s is unavailable: %s", db_path, exc)

    def get(self, key: str) -> Optional[str]:
        try:
            return read_entry(key, db_path=self.db_path)
        except sqlite3.Error as exc:
            raise CacheError(f"read failed for {key}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            write_entry(key, value, db_path=self.db_path)
        except sqlite3.Error as exc:
            raise CacheError(f"write failed for {key}: {exc}") from exc


__all__ = [
    "CacheError",
    "SqliteStore",
    "migrate",
    "read_entry",
    "write_entry",
    "count_entries",
]
