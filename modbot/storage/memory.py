"""In-process storage used for the session tier."""

from typing import Dict, Optional

from .exceptions import StorageQuotaExceeded


class InMemoryStorage:
    """Dict-backed adapter with an optional total size quota in bytes."""

    def __init__(self, max_bytes: Optional[int] = None) -> None:
        self._data: Dict[str, str] = {}
        self._max_bytes = max_bytes

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self._max_bytes is not None:
            size = self._size_without(key) + len(value.encode("utf-8"))
            if size > self._max_bytes:
                raise StorageQuotaExceeded(key, size, self._max_bytes)
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def _size_without(self, key: str) -> int:
        return sum(
            len(value.encode("utf-8"))
            for existing, value in self._data.items()
            if existing != key
        )
