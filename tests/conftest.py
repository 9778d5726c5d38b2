"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

from src.monitord.config.models import Config, DatabaseConfig, Endpoint, MonitorConfig
from src.monitord.errors import PersistenceError, ProbeTransportError
from src.monitord.monitor.types import HealthCheck, ProbeResponse


class FakeRedis:
    """In-memory Redis mock for testing."""

    def __init__(self):
        self._lists: dict[str, list[str]] = {}
        self._hashes: dict[str, dict[str, str]] = {}
        self.closed = False
        self.fail_with: Optional[BaseException] = None

    async def ping(self) -> str:
        """Ping the Redis server."""
        return "PONG"

    async def rpush(self, key: str, *values: str) -> int:
        """Append values to a list."""
        self._lists.setdefault(key, []).extend(values)
        return len(self._lists[key])

    async def ltrim(self, key: str, start: int, end: int) -> bool:
        """Trim a list to the inclusive [start, end] range."""
        items = self._lists.get(key, [])
        length = len(items)
        start = max(start + length, 0) if start < 0 else start
        end = end + length if end < 0 else end
        self._lists[key] = items[start : end + 1]
        return True

    async def lrange(self, key: str, start: int, end: int) -> list[str]:
        """Get a range of list items."""
        items = self._lists.get(key, [])
        length = len(items)
        start = max(start + length, 0) if start < 0 else start
        end = end + length if end < 0 else end
        return items[start : end + 1]

    async def hset(self, key: str, field: str, value: str) -> int:
        """Set a hash field."""
        bucket = self._hashes.setdefault(key, {})
        added = 0 if field in bucket else 1
        bucket[field] = value
        return added

    async def hget(self, key: str, field: str) -> str | None:
        """Get a hash field."""
        return self._hashes.get(key, {}).get(field)

    async def aclose(self) -> None:
        self.closed = True

    def pipeline(self, transaction: bool = True):
        """Create a pipeline context."""
        return FakeRedisPipeline(self, transaction=transaction)

    def dump_list(self, key: str) -> list[str]:
        """Dump contents of a list (test helper)."""
        return list(self._lists.get(key, []))


class FakeRedisPipeline:
    """Redis pipeline mock."""

    def __init__(self, fake_redis: FakeRedis, transaction: bool = True):
        self.fake_redis = fake_redis
        self.transaction = transaction
        self.commands: list[tuple[str, tuple]] = []

    def rpush(self, key: str, *values: str) -> "FakeRedisPipeline":
        self.commands.append(("rpush", (key, *values)))
        return self

    def ltrim(self, key: str, start: int, end: int) -> "FakeRedisPipeline":
        self.commands.append(("ltrim", (key, start, end)))
        return self

    def hset(self, key: str, field: str, value: str) -> "FakeRedisPipeline":
        self.commands.append(("hset", (key, field, value)))
        return self

    async def execute(self) -> list[Any]:
        """Execute all commands."""
        if self.fake_redis.fail_with is not None:
            self.commands.clear()
            raise self.fake_redis.fail_with
        results = []
        for cmd, args in self.commands:
            results.append(await getattr(self.fake_redis, cmd)(*args))
        self.commands.clear()
        return results

    async def __aenter__(self) -> "FakeRedisPipeline":
        return self

    async def __aexit__(self, *args):
        self.commands.clear()


class RecordingStore:
    """Check store that keeps every saved check in memory."""

    def __init__(self, fail_times: int = 0):
        self.checks: List[HealthCheck] = []
        self.fail_times = fail_times
        self.attempts = 0
        self.closed = False
        self.saved = asyncio.Event()

    async def save_check(self, check: HealthCheck) -> None:
        self.attempts += 1
        if self.fail_times > 0:
            self.fail_times -= 1
            raise PersistenceError("disk full", backend="memory")
        self.checks.append(check)
        self.saved.set()

    async def close(self) -> None:
        self.closed = True

    def checks_for(self, url: str) -> List[HealthCheck]:
        return [check for check in self.checks if check.url == url]


class ScriptedProber:
    """Prober returning a fixed outcome per URL and recording call times."""

    def __init__(self, default_status: int = 200):
        self.default_status = default_status
        self.outcomes: Dict[str, Any] = {}
        self.calls: List[tuple[str, float, float]] = []
        self.blockers: Dict[str, asyncio.Event] = {}

    async def probe(self, url: str, timeout_seconds: float) -> ProbeResponse:
        self.calls.append((url, timeout_seconds, asyncio.get_running_loop().time()))
        blocker = self.blockers.get(url)
        if blocker is not None:
            await blocker.wait()
        outcome = self.outcomes.get(url, self.default_status)
        if isinstance(outcome, BaseException):
            raise outcome
        return ProbeResponse(status_code=outcome, elapsed_ms=3)

    def calls_for(self, url: str) -> List[tuple[str, float, float]]:
        return [call for call in self.calls if call[0] == url]


def build_endpoint(url: str = "http://a.example", **overrides: Any) -> Endpoint:
    values: Dict[str, Any] = {
        "name": url.split("//")[-1],
        "url": url,
        "interval": 0.05,
        "timeout": 0.05,
        "tags": ("test",),
        "enabled": True,
    }
    values.update(overrides)
    return Endpoint(**values)


def build_config(*endpoints: Endpoint, config_check_interval: float = 3600.0) -> Config:
    return Config(
        database=DatabaseConfig(path=":memory:"),
        monitor=MonitorConfig(endpoints=tuple(endpoints), config_check_interval=config_check_interval),
    )


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Provide a fake Redis instance."""
    return FakeRedis()


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def scripted_prober() -> ScriptedProber:
    return ScriptedProber()


@pytest.fixture
def endpoint_factory() -> Callable[..., Endpoint]:
    return build_endpoint


@pytest.fixture
def config_factory() -> Callable[..., Config]:
    return build_config


@pytest.fixture
def transport_error() -> ProbeTransportError:
    return ProbeTransportError("ClientConnectorError: Cannot connect to host a.example:80", url="http://a.example")


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0, step: float = 0.005) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() >= deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(step)


@pytest.fixture
def wait_until() -> Callable[..., Any]:
    """Poll a predicate from inside a running test loop."""
    return _wait_until
