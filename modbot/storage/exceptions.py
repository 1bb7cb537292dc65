"""Storage error types."""

from typing import Optional


class StorageUnavailable(Exception):
    """Raised when a storage backend cannot serve a read or write."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        self.key = key
        super().__init__(message)


class StorageQuotaExceeded(StorageUnavailable):
    """Raised when a write would push the backend past its size limit."""

    def __init__(self, key: str, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Storage quota exceeded writing {key!r}: {size} > {limit} bytes",
            key=key,
        )
