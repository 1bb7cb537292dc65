"""Storage adapter interface.

Both memory tiers talk to storage only through this protocol, so the
session tier can live in process memory while the durable tier sits in
SQLite, and tests can swap either for an in-memory fake.
"""

from typing import Optional, Protocol


class StorageAdapter(Protocol):
    """Async key-value capability over string payloads."""

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent.

        Raises:
            StorageUnavailable: If the backend cannot be read.
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Raises:
            StorageUnavailable: If the backend cannot be written.
        """
        ...

    async def remove(self, key: str) -> None:
        """Delete a key. Removing an absent key is a no-op."""
        ...
