"""Session tier: a bounded message buffer scoped to one process lifetime."""

from typing import List, Optional, Sequence

import structlog
from pydantic import ValidationError

from modbot.storage.base import StorageAdapter

from .models import Message, MessageList, generate_id

logger = structlog.get_logger()


class SessionBuffer:
    """Holds the most recent messages of the current session.

    The buffer is mirrored to the ephemeral storage adapter under
    ``session_id``, which is regenerated for every new buffer, so a
    fresh process never sees a previous session's messages.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        max_messages: int = 100,
        session_id: Optional[str] = None,
    ) -> None:
        if max_messages <= 0:
            raise ValueError("max_messages must be positive")
        self._storage = storage
        self._max_messages = max_messages
        self.session_id = session_id or generate_id("session")
        self._messages: List[Message] = []

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    async def append(self, messages: Sequence[Message]) -> None:
        """Replace the buffer with the tail of ``messages`` and persist it.

        A storage failure is logged and ignored; the in-memory buffer
        stays current even though the stored copy is stale.
        """
        self._messages = list(messages)[-self._max_messages:]
        try:
            payload = MessageList.dump_json(self._messages, by_alias=True)
            await self._storage.set(self.session_id, payload.decode("utf-8"))
        except Exception as exc:
            logger.warning(
                "Failed to persist session buffer",
                session_id=self.session_id,
                error=str(exc),
            )

    async def load(self) -> List[Message]:
        """Read the stored session buffer. Missing or corrupt data yields []."""
        try:
            raw = await self._storage.get(self.session_id)
        except Exception as exc:
            logger.warning(
                "Failed to read session buffer",
                session_id=self.session_id,
                error=str(exc),
            )
            return []

        if raw is None:
            return []

        try:
            messages = MessageList.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding malformed session buffer",
                session_id=self.session_id,
                error_count=exc.error_count(),
            )
            return []

        self._messages = messages[-self._max_messages:]
        return list(self._messages)

    def get_context(self, limit: int = 10) -> List[Message]:
        """Return the last ``limit`` buffered messages."""
        if limit <= 0:
            return []
        return self._messages[-limit:]

    async def clear(self) -> None:
        self._messages = []
        try:
            await self._storage.remove(self.session_id)
        except Exception as exc:
            logger.warning(
                "Failed to clear session buffer",
                session_id=self.session_id,
                error=str(exc),
            )
