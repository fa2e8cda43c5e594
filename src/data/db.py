"""
Family Chores: Local Cache Database.

The device-local mirror of the household's data: the last known chore list,
member list and this device's sharing code, each kept in its own named slot.
Implements StoragePort on top of SQLite; every get/set/clear is a single
statement in its own transaction, so one slot is never half-written, but
nothing spans several slots.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class CacheDB:
    """SQLite-backed slot storage for the local cache."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.CACHE_DB_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the slots table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS slots (
                    name        TEXT PRIMARY KEY,
                    value       TEXT NOT NULL,
                    updated_at  TEXT NOT NULL
                )
            """)
        logger.debug("Cache slots table initialized at %s", self._db_path)

    def get(self, slot: str) -> str | None:
        """Return the stored value of a slot, or None if never set."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM slots WHERE name = ?", (slot,)
            ).fetchone()
        return None if row is None else row["value"]

    def set(self, slot: str, value: str) -> None:
        """Create or overwrite a slot."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO slots (name, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(name) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (slot, value, datetime.now().isoformat()),
            )
        logger.debug("Cache slot %s written (%d chars)", slot, len(value))

    def clear(self, slot: str) -> None:
        """Remove a slot; clearing a missing slot is a no-op."""
        with self._connect() as conn:
            conn.execute("DELETE FROM slots WHERE name = ?", (slot,))
        logger.debug("Cache slot %s cleared", slot)
