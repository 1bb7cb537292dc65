"""Archive statistics."""

from typing import Sequence

from .models import ArchiveStatistics, Conversation


def compute_statistics(conversations: Sequence[Conversation]) -> ArchiveStatistics:
    if not conversations:
        return ArchiveStatistics()

    total_messages = sum(len(c.messages) for c in conversations)
    updated = [c.updated_at for c in conversations]

    return ArchiveStatistics(
        total_conversations=len(conversations),
        pinned_conversations=sum(1 for c in conversations if c.is_pinned),
        total_messages=total_messages,
        # Round half up, not to even.
        average_messages_per_conversation=int(total_messages / len(conversations) + 0.5),
        oldest_updated_at=min(updated),
        newest_updated_at=max(updated),
    )
