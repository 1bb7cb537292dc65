"""ChatSession -- one user/assistant exchange from input to archive.

Builds the context window from memory, calls the model client, assembles
the reply and records the exchange in both memory tiers.
"""

from typing import List, Optional

import structlog

from modbot.llm.interface import ModelClient, collect_stream
from modbot.memory.context import to_history
from modbot.memory.manager import MemoryManager
from modbot.memory.models import Clock, IdFactory, Message, Role

logger = structlog.get_logger()

FALLBACK_REPLY = "I apologize, but I encountered an error. Please try again."


class ChatSession:
    """Drives a single conversation against a model client."""

    def __init__(
        self,
        client: ModelClient,
        memory: MemoryManager,
        stream: bool = True,
        include_session_context: bool = True,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self._client = client
        self._memory = memory
        self._stream = stream
        self._include_session_context = include_session_context
        self._clock = clock
        self._id_factory = id_factory
        self.messages: List[Message] = []
        self.conversation_id: Optional[str] = None

    async def send(self, text: str) -> Message:
        """Send user text and return the assistant's reply message.

        A failing model call is logged and answered with a fixed apology
        so the exchange is still recorded.

        Raises:
            ValueError: If ``text`` is blank.
            StorageUnavailable: If auto-save is on and the archive write failed.
        """
        if not text.strip():
            raise ValueError("Message text must not be empty")

        context = self._memory.context.build_context(
            self.messages, self._include_session_context
        )
        history = to_history(context)

        self.messages.append(self._new_message("user", text))

        try:
            if self._stream:
                reply = await collect_stream(self._client.stream(text, history))
            else:
                reply = await self._client.chat(text, history)
        except Exception as exc:
            logger.error(
                "Model invocation failed",
                conversation_id=self.conversation_id,
                error=str(exc),
            )
            reply = FALLBACK_REPLY

        assistant = self._new_message("assistant", reply)
        self.messages.append(assistant)

        self.conversation_id = await self._memory.record_exchange(
            self.messages, self.conversation_id
        )
        return assistant

    async def open(self, conversation_id: str) -> bool:
        """Resume an archived conversation. Returns False if it is not found."""
        conversation = await self._memory.conversations.load(conversation_id)
        if conversation is None:
            return False
        self.messages = list(conversation.messages)
        self.conversation_id = conversation.id
        logger.info(
            "Opened conversation",
            conversation_id=conversation.id,
            messages=len(self.messages),
        )
        return True

    def new_conversation(self) -> None:
        self.messages = []
        self.conversation_id = None

    def _new_message(self, role: Role, content: str) -> Message:
        return Message.create(
            role, content, id_factory=self._id_factory, clock=self._clock
        )
