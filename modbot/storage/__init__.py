"""Key-value storage adapters for the session and durable tiers."""

from .base import StorageAdapter
from .database import DatabaseManager
from .exceptions import StorageQuotaExceeded, StorageUnavailable
from .memory import InMemoryStorage
from .sqlite import SQLiteStorage

__all__ = [
    "DatabaseManager",
    "InMemoryStorage",
    "SQLiteStorage",
    "StorageAdapter",
    "StorageQuotaExceeded",
    "StorageUnavailable",
]
