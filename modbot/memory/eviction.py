"""Pin-aware capacity eviction for the durable archive."""

from typing import List, Sequence

from .models import Conversation


def apply_eviction(
    conversations: Sequence[Conversation], max_stored: int
) -> List[Conversation]:
    """Keep every pinned conversation, then fill the rest with unpinned ones.

    Unpinned conversations keep their existing order (most recent first);
    those past the remaining capacity are dropped. When pinned entries
    alone reach ``max_stored`` no unpinned entry survives.
    """
    pinned = [c for c in conversations if c.is_pinned]
    unpinned = [c for c in conversations if not c.is_pinned]
    slots = max(0, max_stored - len(pinned))
    return pinned + unpinned[:slots]
