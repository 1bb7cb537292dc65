"""Durable key-value adapter backed by SQLite."""

import sqlite3
from typing import Optional

import structlog

from .database import DatabaseManager
from .exceptions import StorageUnavailable

logger = structlog.get_logger()


class SQLiteStorage:
    """Key-value access to the ``kv_store`` table, scoped by namespace."""

    def __init__(self, db_manager: DatabaseManager, namespace: str = "default"):
        """Initialize adapter."""
        self.db = db_manager
        self.namespace = namespace

    async def get(self, key: str) -> Optional[str]:
        try:
            async with self.db.get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT value FROM kv_store WHERE namespace = ? AND key = ?",
                    (self.namespace, key),
                )
                row = await cursor.fetchone()
        except (sqlite3.Error, OSError) as exc:
            raise StorageUnavailable(f"Failed to read {key!r}: {exc}", key=key) from exc
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        try:
            async with self.db.get_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO kv_store (namespace, key, value)
                    VALUES (?, ?, ?)
                    ON CONFLICT(namespace, key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (self.namespace, key, value),
                )
                await conn.commit()
        except (sqlite3.Error, OSError) as exc:
            raise StorageUnavailable(f"Failed to write {key!r}: {exc}", key=key) from exc
        logger.debug("Stored value", namespace=self.namespace, key=key, size=len(value))

    async def remove(self, key: str) -> None:
        try:
            async with self.db.get_connection() as conn:
                await conn.execute(
                    "DELETE FROM kv_store WHERE namespace = ? AND key = ?",
                    (self.namespace, key),
                )
                await conn.commit()
        except (sqlite3.Error, OSError) as exc:
            raise StorageUnavailable(f"Failed to remove {key!r}: {exc}", key=key) from exc
