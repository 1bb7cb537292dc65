"""Tests for DatabaseManager and SQLiteStorage."""

from pathlib import Path
from unittest.mock import patch

import pytest

from modbot.storage.database import DatabaseManager, _database_path
from modbot.storage.exceptions import StorageUnavailable
from modbot.storage.sqlite import SQLiteStorage


@pytest.fixture
async def db_manager(tmp_path):
    """Create test database manager with the schema applied."""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'nested' / 'test.db'}")
    await manager.initialize()
    yield manager
    await manager.close()


@pytest.fixture
def sqlite_storage(db_manager) -> SQLiteStorage:
    return SQLiteStorage(db_manager, namespace="tests")


class TestDatabasePath:
    def test_sqlite_url(self):
        assert _database_path("sqlite:///data/modbot.db") == Path("data/modbot.db")

    def test_absolute_sqlite_url(self):
        assert _database_path("sqlite:////tmp/modbot.db") == Path("/tmp/modbot.db")

    def test_plain_path(self):
        assert _database_path("modbot.db") == Path("modbot.db")

    def test_rejects_other_schemes(self):
        with pytest.raises(ValueError):
            _database_path("postgresql://localhost/modbot")


class TestDatabaseManager:
    async def test_initialize_creates_file_and_parent(self, db_manager):
        assert db_manager.database_path.exists()
        assert db_manager.is_initialized

    async def test_schema_has_kv_store(self, db_manager):
        async with db_manager.get_connection() as conn:
            cursor = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'kv_store'"
            )
            row = await cursor.fetchone()
        assert row is not None

    async def test_initialize_is_repeatable(self, db_manager):
        await db_manager.initialize()
        assert db_manager.is_initialized


class TestSQLiteStorage:
    """Tests for SQLiteStorage key-value operations."""

    async def test_get_missing_returns_none(self, sqlite_storage):
        assert await sqlite_storage.get("missing") is None

    async def test_set_and_get(self, sqlite_storage):
        await sqlite_storage.set("key", '[{"id": "conv-1"}]')
        assert await sqlite_storage.get("key") == '[{"id": "conv-1"}]'

    async def test_set_overwrites(self, sqlite_storage):
        await sqlite_storage.set("key", "first")
        await sqlite_storage.set("key", "second")
        assert await sqlite_storage.get("key") == "second"

    async def test_remove(self, sqlite_storage):
        await sqlite_storage.set("key", "value")
        await sqlite_storage.remove("key")
        assert await sqlite_storage.get("key") is None

    async def test_remove_missing_is_noop(self, sqlite_storage):
        await sqlite_storage.remove("never-set")

    async def test_namespaces_are_isolated(self, db_manager):
        first = SQLiteStorage(db_manager, namespace="one")
        second = SQLiteStorage(db_manager, namespace="two")

        await first.set("key", "from one")

        assert await second.get("key") is None
        assert await first.get("key") == "from one"

    async def test_persists_across_managers(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'shared.db'}"
        writer = DatabaseManager(url)
        await writer.initialize()
        await SQLiteStorage(writer).set("key", "durable")
        await writer.close()

        reader = DatabaseManager(url)
        await reader.initialize()
        assert await SQLiteStorage(reader).get("key") == "durable"

    async def test_missing_schema_raises_storage_unavailable(self, tmp_path):
        """Reads against an uninitialized database surface as StorageUnavailable."""
        manager = DatabaseManager(f"sqlite:///{tmp_path / 'empty.db'}")
        storage = SQLiteStorage(manager)

        with pytest.raises(StorageUnavailable):
            await storage.get("key")
        with pytest.raises(StorageUnavailable):
            await storage.set("key", "value")

    async def test_connection_failure_raises_storage_unavailable(self, sqlite_storage):
        with patch(
            "modbot.storage.database.aiosqlite.connect",
            side_effect=OSError("disk unavailable"),
        ):
            with pytest.raises(StorageUnavailable) as exc_info:
                await sqlite_storage.set("key", "value")

        assert exc_info.value.key == "key"
