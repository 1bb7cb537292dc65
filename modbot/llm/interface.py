"""Model client interface.

Defines the Protocol the chat layer uses to reach a language model. The
memory subsystem never calls a model itself; it only hands over history
and receives the final reply text.
"""

from typing import AsyncIterator, Dict, List, Protocol


class ModelClient(Protocol):
    """Protocol for a local language-model backend."""

    async def chat(self, message: str, history: List[Dict[str, str]]) -> str:
        """Send a message and return the complete reply.

        Args:
            message: The new user message.
            history: Prior ``{role, content}`` pairs, oldest first.

        Returns:
            The assistant's reply text.
        """
        ...

    def stream(
        self, message: str, history: List[Dict[str, str]]
    ) -> AsyncIterator[str]:
        """Send a message and yield the reply as text fragments.

        The iterator is finite and can only be consumed once.
        """
        ...


async def collect_stream(fragments: AsyncIterator[str]) -> str:
    """Concatenate streamed fragments into the final reply."""
    parts: List[str] = []
    async for fragment in fragments:
        parts.append(fragment)
    return "".join(parts)
