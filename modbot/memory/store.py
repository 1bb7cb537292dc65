"""Durable tier: the conversation archive.

The whole archive is stored as one JSON array under a single key. Every
operation reads the full snapshot, changes it, and writes it back, which
assumes a single writer per key.
"""

import json
from typing import Callable, List, Optional, Sequence

import structlog
from pydantic import ValidationError

from modbot.storage.base import StorageAdapter
from modbot.storage.exceptions import StorageUnavailable

from .eviction import apply_eviction
from .models import (
    ArchiveStatistics,
    Clock,
    Conversation,
    ConversationList,
    IdFactory,
    Message,
    derive_title,
    generate_id,
    utc_now,
)
from .statistics import compute_statistics

logger = structlog.get_logger()


class ConversationStore:
    """CRUD, search, import/export and statistics over the archive.

    Only ``save`` raises on a storage failure. Reads degrade to empty
    results; the other writes report failure by returning False.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        storage_key: str = "modbot-conversations",
        max_stored_conversations: int = 50,
        max_messages_per_conversation: int = 1000,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        if max_stored_conversations <= 0 or max_messages_per_conversation <= 0:
            raise ValueError("conversation limits must be positive")
        self._storage = storage
        self._key = storage_key
        self._max_stored = max_stored_conversations
        self._max_messages = max_messages_per_conversation
        self._clock = clock or utc_now
        self._id_factory = id_factory or (lambda: generate_id("conv"))

    async def save(
        self,
        messages: Sequence[Message],
        conversation_id: Optional[str] = None,
    ) -> str:
        """Insert or update a conversation and return its id.

        An existing conversation keeps its title, creation time and pin
        state, and moves to the front of the archive. Eviction runs
        before the archive is written.

        Raises:
            StorageUnavailable: If the archive could not be read or written.
        """
        archive = await self._read_archive(strict=True)
        now = self._clock()
        conversation_id = conversation_id or self._id_factory()
        existing = next((c for c in archive if c.id == conversation_id), None)

        conversation = Conversation(
            id=conversation_id,
            title=existing.title if existing else derive_title(messages, now),
            messages=list(messages)[-self._max_messages:],
            created_at=existing.created_at if existing else now,
            updated_at=now,
            is_pinned=existing.is_pinned if existing else False,
        )

        others = [c for c in archive if c.id != conversation_id]
        retained = apply_eviction([conversation] + others, self._max_stored)

        try:
            await self._write_archive(retained)
        except StorageUnavailable as exc:
            logger.error(
                "Failed to save conversation",
                conversation_id=conversation_id,
                error=str(exc),
            )
            raise

        evicted = len(others) + 1 - len(retained)
        logger.info(
            "Saved conversation",
            conversation_id=conversation_id,
            messages=len(conversation.messages),
            created=existing is None,
            evicted=evicted,
        )
        return conversation_id

    async def load(self, conversation_id: str) -> Optional[Conversation]:
        archive = await self._read_archive()
        return next((c for c in archive if c.id == conversation_id), None)

    async def list_all(self) -> List[Conversation]:
        return await self._read_archive()

    async def delete(self, conversation_id: str) -> bool:
        """Remove a conversation. Returns False if absent or on failure."""
        archive = await self._read_archive()
        remaining = [c for c in archive if c.id != conversation_id]
        if len(remaining) == len(archive):
            return False

        try:
            await self._write_archive(remaining)
        except Exception as exc:
            logger.warning(
                "Failed to delete conversation",
                conversation_id=conversation_id,
                error=str(exc),
            )
            return False
        return True

    async def pin(self, conversation_id: str) -> bool:
        """Toggle the pinned flag. Calling twice restores the original state."""
        return await self._modify(
            conversation_id,
            lambda c: c.model_copy(update={"is_pinned": not c.is_pinned}),
            action="pin",
        )

    async def rename(self, conversation_id: str, title: str) -> bool:
        return await self._modify(
            conversation_id,
            lambda c: c.model_copy(update={"title": title}),
            action="rename",
        )

    async def regenerate_title(self, conversation_id: str) -> bool:
        """Re-derive the title from the conversation's current messages."""
        now = self._clock()
        return await self._modify(
            conversation_id,
            lambda c: c.model_copy(update={"title": derive_title(c.messages, now)}),
            action="regenerate_title",
        )

    async def search(self, query: str) -> List[Conversation]:
        """Case-insensitive substring match on titles and message content."""
        needle = query.lower()
        return [
            c
            for c in await self._read_archive()
            if needle in c.title.lower()
            or any(needle in m.content.lower() for m in c.messages)
        ]

    async def export_all(self) -> str:
        archive = await self._read_archive()
        return ConversationList.dump_json(archive, indent=2, by_alias=True).decode(
            "utf-8"
        )

    async def import_all(self, blob: str) -> bool:
        """Replace the whole archive with an exported snapshot.

        The payload must be a JSON array of valid conversations with
        distinct ids; anything else is rejected and the current archive is
        left as it was. Message lists are trimmed to the per-conversation
        limit.
        """
        try:
            payload = json.loads(blob)
        except (TypeError, ValueError) as exc:
            logger.warning("Rejected import: invalid JSON", error=str(exc))
            return False

        if not isinstance(payload, list):
            logger.warning(
                "Rejected import: payload is not a list",
                payload_type=type(payload).__name__,
            )
            return False

        try:
            conversations = ConversationList.validate_python(payload)
        except ValidationError as exc:
            logger.warning(
                "Rejected import: invalid conversation records",
                error_count=exc.error_count(),
            )
            return False

        ids = [c.id for c in conversations]
        if len(set(ids)) != len(ids):
            logger.warning("Rejected import: duplicate conversation ids")
            return False

        conversations = [
            c.model_copy(update={"messages": c.messages[-self._max_messages:]})
            for c in conversations
        ]

        try:
            await self._write_archive(conversations)
        except Exception as exc:
            logger.warning("Failed to import conversations", error=str(exc))
            return False

        logger.info("Imported conversations", count=len(conversations))
        return True

    async def clear_all(self) -> None:
        try:
            await self._storage.remove(self._key)
        except Exception as exc:
            logger.warning("Failed to clear conversations", error=str(exc))

    async def statistics(self) -> ArchiveStatistics:
        return compute_statistics(await self._read_archive())

    # --- storage ---

    async def _modify(
        self,
        conversation_id: str,
        change: Callable[[Conversation], Conversation],
        action: str,
    ) -> bool:
        """Apply ``change`` to one conversation in place and write the archive."""
        archive = await self._read_archive()
        for index, conversation in enumerate(archive):
            if conversation.id == conversation_id:
                archive[index] = change(conversation)
                break
        else:
            return False

        try:
            await self._write_archive(archive)
        except Exception as exc:
            logger.warning(
                "Failed to update conversation",
                action=action,
                conversation_id=conversation_id,
                error=str(exc),
            )
            return False
        return True

    async def _read_archive(self, strict: bool = False) -> List[Conversation]:
        """Load the archive. Malformed data reads as empty.

        With ``strict`` a storage failure is raised instead of read as
        empty, so a write based on the result cannot drop stored entries.
        """
        try:
            raw = await self._storage.get(self._key)
        except Exception as exc:
            if strict:
                logger.error("Failed to read conversations", error=str(exc))
                raise
            logger.warning("Failed to read conversations", error=str(exc))
            return []

        if raw is None:
            return []

        try:
            return ConversationList.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding malformed conversation archive",
                key=self._key,
                error_count=exc.error_count(),
            )
            return []

    async def _write_archive(self, conversations: Sequence[Conversation]) -> None:
        payload = ConversationList.dump_json(list(conversations), by_alias=True)
        await self._storage.set(self._key, payload.decode("utf-8"))
