"""Two-tier conversation memory: session buffer and durable archive."""

from .context import ContextBuilder, to_history
from .manager import MemoryManager, create_memory_manager
from .models import ArchiveStatistics, Attachment, Conversation, Message
from .session import SessionBuffer
from .store import ConversationStore

__all__ = [
    "ArchiveStatistics",
    "Attachment",
    "ContextBuilder",
    "Conversation",
    "ConversationStore",
    "MemoryManager",
    "Message",
    "SessionBuffer",
    "create_memory_manager",
    "to_history",
]
