"""SQLite connection management for the durable tier."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite
import structlog

logger = structlog.get_logger()

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    namespace TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (namespace, key)
);
"""


def _database_path(database_url: str) -> Path:
    """Extract the file path from a ``sqlite:///path`` URL."""
    prefix = "sqlite:///"
    if database_url.startswith(prefix):
        return Path(database_url[len(prefix):])
    if "://" in database_url:
        raise ValueError(f"Unsupported database URL: {database_url}")
    return Path(database_url)


class DatabaseManager:
    """Opens aiosqlite connections to a single database file."""

    def __init__(self, database_url: str) -> None:
        self.database_path = _database_path(database_url)
        self._initialized = False

    async def initialize(self) -> None:
        """Create the database file and schema if needed."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        async with self.get_connection() as conn:
            await conn.executescript(SCHEMA)
            await conn.commit()
        self._initialized = True
        logger.info("Database initialized", path=str(self.database_path))

    @asynccontextmanager
    async def get_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield a connection that is closed on exit."""
        conn = await aiosqlite.connect(self.database_path)
        conn.row_factory = aiosqlite.Row
        try:
            yield conn
        finally:
            await conn.close()

    async def close(self) -> None:
        # Connections are per-call; nothing is held open between them.
        self._initialized = False
        logger.debug("Database closed", path=str(self.database_path))

    @property
    def is_initialized(self) -> bool:
        return self._initialized
