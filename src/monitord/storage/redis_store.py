from __future__ import annotations

"""
Redis-backed check store.

Each URL keeps a capped list of JSON-encoded checks under
``monitord:checks:<url>`` and the newest check per URL lives in the
``monitord:latest`` hash.
"""

import asyncio
import logging
from typing import Any, Dict, List

import orjson
import redis.asyncio
from redis.exceptions import RedisError

from ..errors import PersistenceError
from ..monitor.types import HealthCheck

logger = logging.getLogger(__name__)

REDIS_ERRORS = (RedisError, asyncio.TimeoutError, OSError, RuntimeError)

CHECKS_KEY_PREFIX = "monitord:checks:"
LATEST_KEY = "monitord:latest"


def checks_key(url: str) -> str:
    return f"{CHECKS_KEY_PREFIX}{url}"


class RedisCheckStore:
    """Persists health checks into Redis lists."""

    backend = "redis"

    def __init__(self, client: redis.asyncio.Redis, max_entries: int = 1000):
        self.client = client
        self.max_entries = max_entries

    @classmethod
    async def connect(cls, redis_url: str, max_entries: int = 1000) -> "RedisCheckStore":
        """
        Connect to ``redis_url`` and verify the server answers.

        Raises:
            PersistenceError: If the server cannot be reached
        """
        client = redis.asyncio.from_url(redis_url)
        try:
            await client.ping()
        except REDIS_ERRORS as exc:
            await client.aclose()
            raise PersistenceError(f"Redis connection failed: {type(exc).__name__}: {exc}", backend=cls.backend) from exc
        logger.info("Connected Redis check store at %s", redis_url)
        return cls(client, max_entries=max_entries)

    async def save_check(self, check: HealthCheck) -> None:
        payload = orjson.dumps(check.to_record()).decode("utf-8")
        key = checks_key(check.url)
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.rpush(key, payload)
                pipe.ltrim(key, -self.max_entries, -1)
                pipe.hset(LATEST_KEY, check.url, payload)
                await pipe.execute()
        except REDIS_ERRORS as exc:
            raise PersistenceError(f"Failed to save check for {check.url}: {exc}", backend=self.backend) from exc

    async def recent_checks(self, url: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Return the newest stored checks for ``url``, newest first."""
        try:
            raw_items = await self.client.lrange(checks_key(url), -limit, -1)
        except REDIS_ERRORS as exc:
            raise PersistenceError(f"Failed to read checks for {url}: {exc}", backend=self.backend) from exc
        try:
            return [orjson.loads(item) for item in reversed(raw_items)]
        except orjson.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt check payload stored for {url}", backend=self.backend) from exc

    async def close(self) -> None:
        try:
            await self.client.aclose()
        except REDIS_ERRORS as exc:
            raise PersistenceError(f"Failed to close Redis connection: {exc}", backend=self.backend) from exc
