"""Memory manager — owns both memory tiers and the context builder."""

from typing import Optional, Sequence

import structlog

from modbot.config.logging import configure_logging
from modbot.config.settings import Settings, get_settings
from modbot.storage.base import StorageAdapter
from modbot.storage.database import DatabaseManager
from modbot.storage.memory import InMemoryStorage
from modbot.storage.sqlite import SQLiteStorage

from .context import ContextBuilder
from .models import Clock, IdFactory, Message
from .session import SessionBuffer
from .store import ConversationStore

logger = structlog.get_logger()


class MemoryManager:
    """Session buffer, conversation archive and context assembly in one place.

    Storage adapters are injected: one ephemeral for the session tier and
    one durable for the archive.
    """

    def __init__(
        self,
        session_storage: StorageAdapter,
        durable_storage: StorageAdapter,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
        session_id: Optional[str] = None,
        db_manager: Optional[DatabaseManager] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._db = db_manager

        self.session = SessionBuffer(
            session_storage,
            max_messages=self._settings.max_session_messages,
            session_id=session_id,
        )
        self.conversations = ConversationStore(
            durable_storage,
            storage_key=self._settings.storage_key,
            max_stored_conversations=self._settings.max_stored_conversations,
            max_messages_per_conversation=self._settings.max_messages_per_conversation,
            clock=clock,
            id_factory=id_factory,
        )
        self.context = ContextBuilder(
            self.session, session_window=self._settings.context_session_messages
        )

    @property
    def auto_save(self) -> bool:
        return self._settings.auto_save

    async def record_exchange(
        self,
        messages: Sequence[Message],
        conversation_id: Optional[str] = None,
    ) -> Optional[str]:
        """Buffer the latest messages and, with auto-save on, archive them.

        Returns the conversation id (unchanged when auto-save is off).

        Raises:
            StorageUnavailable: If auto-save is on and the archive write failed.
        """
        await self.session.append(messages)
        if not self.auto_save:
            return conversation_id
        return await self.conversations.save(messages, conversation_id)

    async def clear_all(self) -> None:
        await self.session.clear()
        await self.conversations.clear_all()
        logger.info("Cleared all memory", session_id=self.session.session_id)

    async def close(self) -> None:
        if self._db:
            await self._db.close()


async def create_memory_manager(settings: Optional[Settings] = None) -> MemoryManager:
    """Build a manager with an in-process session tier and a SQLite archive.

    Also configures logging from ``settings`` (defaults to ``get_settings()``).
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)
    db_manager = DatabaseManager(settings.database_url)
    await db_manager.initialize()

    manager = MemoryManager(
        session_storage=InMemoryStorage(),
        durable_storage=SQLiteStorage(db_manager, namespace="conversations"),
        settings=settings,
        db_manager=db_manager,
    )
    logger.info(
        "Memory manager created",
        session_id=manager.session.session_id,
        database=str(db_manager.database_path),
        auto_save=settings.auto_save,
    )
    return manager
