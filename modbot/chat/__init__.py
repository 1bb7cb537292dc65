"""Chat exchange orchestration."""

from .session import FALLBACK_REPLY, ChatSession

__all__ = ["ChatSession", "FALLBACK_REPLY"]
