from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import orjson
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.monitord.errors import PersistenceError
from src.monitord.monitor.types import CheckStatus, HealthCheck
from src.monitord.storage.redis_store import LATEST_KEY, RedisCheckStore, checks_key


def _check(status_code=200, url="http://a.example"):
    return HealthCheck(
        name="a",
        url=url,
        status=CheckStatus.UP if status_code == 200 else CheckStatus.DEGRADED,
        timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        status_code=status_code,
        response_time_ms=5,
    )


class TestRedisCheckStore:
    @pytest.mark.asyncio
    async def test_save_appends_and_updates_latest(self, fake_redis):
        store = RedisCheckStore(fake_redis)

        await store.save_check(_check(200))
        await store.save_check(_check(503))

        stored = [orjson.loads(item) for item in fake_redis.dump_list(checks_key("http://a.example"))]
        assert [item["status_code"] for item in stored] == [200, 503]
        latest = orjson.loads(await fake_redis.hget(LATEST_KEY, "http://a.example"))
        assert latest["status"] == "DEGRADED"

    @pytest.mark.asyncio
    async def test_list_is_capped(self, fake_redis):
        store = RedisCheckStore(fake_redis, max_entries=2)

        for code in (200, 500, 502):
            await store.save_check(_check(code))

        assert len(fake_redis.dump_list(checks_key("http://a.example"))) == 2
        rows = await store.recent_checks("http://a.example")
        assert [row["status_code"] for row in rows] == [502, 500]

    @pytest.mark.asyncio
    async def test_redis_failure_raises_persistence_error(self, fake_redis):
        fake_redis.fail_with = RedisConnectionError("connection reset")
        store = RedisCheckStore(fake_redis)

        with pytest.raises(PersistenceError, match="Failed to save check for http://a.example") as excinfo:
            await store.save_check(_check())
        assert excinfo.value.backend == "redis"

    @pytest.mark.asyncio
    async def test_corrupt_payload_raises_persistence_error(self, fake_redis):
        await fake_redis.rpush(checks_key("http://a.example"), "{not json")
        store = RedisCheckStore(fake_redis)

        with pytest.raises(PersistenceError, match="Corrupt"):
            await store.recent_checks("http://a.example")

    @pytest.mark.asyncio
    async def test_close_closes_client(self, fake_redis):
        store = RedisCheckStore(fake_redis)
        await store.close()

        assert fake_redis.closed

    @pytest.mark.asyncio
    async def test_connect_pings_server(self, fake_redis):
        with patch("redis.asyncio.from_url", return_value=fake_redis) as from_url:
            store = await RedisCheckStore.connect("redis://localhost:6379/0", max_entries=50)

        from_url.assert_called_once_with("redis://localhost:6379/0")
        assert store.client is fake_redis
        assert store.max_entries == 50

    @pytest.mark.asyncio
    async def test_connect_failure_closes_client(self):
        client = MagicMock()
        client.ping = AsyncMock(side_effect=RedisConnectionError("refused"))
        client.aclose = AsyncMock()

        with patch("redis.asyncio.from_url", return_value=client):
            with pytest.raises(PersistenceError, match="Redis connection failed"):
                await RedisCheckStore.connect("redis://localhost:6379/0")

        client.aclose.assert_awaited_once()
