"""
SQLite Key/Value Store (long-lived scope).

Implements KeyValueStorePort on a single `kv_store` table so values
survive process restarts, like localStorage survives browser restarts.

Invariants:
- Each set/remove is its own committed statement (atomic per key)
- sqlite3 errors never leak: they become StorageUnavailableError
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from attribution_engine.core.ports.storage import StorageScope, StorageUnavailableError

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class SQLiteKeyValueStore:
    """SQLite implementation of KeyValueStorePort."""

    def __init__(
        self,
        db_path: str | Path,
        connection: sqlite3.Connection | None = None,
    ) -> None:
        self.db_path = str(db_path)
        self._external_conn = connection
        if connection is None and self.db_path == ":memory:":
            # A private in-memory database only lives as long as its connection,
            # which the dispatch worker thread shares
            self._external_conn = sqlite3.connect(":memory:", check_same_thread=False)
        self._initialized = False

    @property
    def scope(self) -> StorageScope:
        return StorageScope.LONG_LIVED

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        if not self._initialized:
            conn.execute(_SCHEMA)
            self._initialized = True

    def get(self, key: str) -> str | None:
        try:
            conn = self._get_conn()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailableError("get", key, str(e)) from e
        try:
            self._ensure_schema(conn)
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None
        except sqlite3.Error as e:
            raise StorageUnavailableError("get", key, str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def set(self, key: str, value: str) -> None:
        try:
            conn = self._get_conn()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailableError("set", key, str(e)) from e
        try:
            self._ensure_schema(conn)
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(UTC).isoformat()),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageUnavailableError("set", key, str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def remove(self, key: str) -> None:
        try:
            conn = self._get_conn()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailableError("remove", key, str(e)) from e
        try:
            self._ensure_schema(conn)
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as e:
            raise StorageUnavailableError("remove", key, str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def keys(self) -> list[str]:
        """Stored keys (for inspection)."""
        try:
            conn = self._get_conn()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailableError("keys", "*", str(e)) from e
        try:
            self._ensure_schema(conn)
            rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
            return [row[0] for row in rows]
        except sqlite3.Error as e:
            raise StorageUnavailableError("keys", "*", str(e)) from e
        finally:
            if self._should_close():
                conn.close()
