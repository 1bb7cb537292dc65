"""Context window assembly for model invocation."""

from typing import Dict, List, Sequence

from .models import Message
from .session import SessionBuffer

DEFAULT_SESSION_WINDOW = 6


class ContextBuilder:
    """Merges recent session messages with the current conversation."""

    def __init__(
        self, session: SessionBuffer, session_window: int = DEFAULT_SESSION_WINDOW
    ) -> None:
        self._session = session
        self._session_window = session_window

    def build_context(
        self,
        current_messages: Sequence[Message],
        include_session_context: bool = True,
    ) -> List[Message]:
        """Return session tail + current messages, deduplicated by id.

        The first occurrence of an id wins and keeps its position.
        """
        candidates: List[Message] = []
        if include_session_context:
            candidates.extend(self._session.get_context(self._session_window))
        candidates.extend(current_messages)

        seen: set[str] = set()
        context: List[Message] = []
        for message in candidates:
            if message.id in seen:
                continue
            seen.add(message.id)
            context.append(message)
        return context


def to_history(messages: Sequence[Message]) -> List[Dict[str, str]]:
    """Convert messages to the ``{role, content}`` pairs a model client takes."""
    return [{"role": m.role, "content": m.content} for m in messages]
