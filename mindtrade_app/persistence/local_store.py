"""Local key/value persistence for the bearer token and filter presets."""

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..errors import PersistenceError
from ..logging.config import get_logger


class LocalStore:
    """SQLite-backed JSON key/value store."""

    def __init__(self, db_path: str = "~/.mindtrade/mindtrade.db"):
        self.db_path = Path(db_path).expanduser()
        self.logger = get_logger("mindtrade.store")
        self._lock = threading.Lock()

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", db_path=str(self.db_path), error=str(e))
            raise
        finally:
            if conn:
                conn.close()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a value.

        Args:
            key: Entry key
            default: Returned when the key is absent or unreadable

        Returns:
            The JSON-decoded value, or ``default``
        """
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT value FROM entries WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error:
            return default

        if row is None:
            return default

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            self.logger.warning("Discarding corrupt entry", key=key, error=str(e))
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Write a JSON-serializable value.

        Raises:
            PersistenceError: If the value cannot be stored
        """
        with self._lock:
            try:
                encoded = json.dumps(value)
                with self._get_connection() as conn:
                    conn.execute("""
                        INSERT OR REPLACE INTO entries (key, value, updated_at)
                        VALUES (?, ?, ?)
                    """, (key, encoded, datetime.now(timezone.utc).isoformat()))
                    conn.commit()
            except (sqlite3.Error, TypeError, ValueError) as e:
                raise PersistenceError(
                    f"Failed to store {key}: {e}",
                    operation="set",
                    target=str(self.db_path)
                ) from e

        self.logger.debug("Entry stored", key=key)

    def delete(self, key: str) -> bool:
        """
        Remove a value.

        Returns:
            True if an entry was removed

        Raises:
            PersistenceError: If the store cannot be written
        """
        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute("DELETE FROM entries WHERE key = ?", (key,))
                    conn.commit()
                    removed = cursor.rowcount > 0
            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to delete {key}: {e}",
                    operation="delete",
                    target=str(self.db_path)
                ) from e

        if removed:
            self.logger.debug("Entry deleted", key=key)
        return removed

    def keys(self) -> list[str]:
        """List stored keys."""
        try:
            with self._get_connection() as conn:
                rows = conn.execute("SELECT key FROM entries ORDER BY key").fetchall()
        except sqlite3.Error:
            return []
        return [row["key"] for row in rows]

    def updated_at(self, key: str) -> Optional[str]:
        """ISO timestamp of the last write to ``key``."""
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT updated_at FROM entries WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error:
            return None
        return row["updated_at"] if row else None
