"""Health check persistence backends."""

from .base import CheckStore
from .factory import open_store
from .redis_store import RedisCheckStore
from .sqlite_store import SQLiteCheckStore

__all__ = [
    "CheckStore",
    "RedisCheckStore",
    "SQLiteCheckStore",
    "open_store",
]
