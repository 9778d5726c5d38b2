"""Backend selection for the check store."""

import asyncio

from ..config.errors import ConfigurationError
from ..config.models import DatabaseConfig
from .base import CheckStore
from .redis_store import RedisCheckStore
from .sqlite_store import SQLiteCheckStore


async def open_store(database: DatabaseConfig) -> CheckStore:
    """Open the check store selected by ``database.backend``."""
    if database.backend == "sqlite":
        return await asyncio.to_thread(SQLiteCheckStore.open, database.path)
    if database.backend == "redis":
        if not database.redis_url:
            raise ConfigurationError.missing_value("database.redis_url", "required for the redis backend")
        return await RedisCheckStore.connect(database.redis_url, max_entries=database.redis_max_entries)
    raise ConfigurationError.invalid_format("database.backend", database.backend, "sqlite or redis")
