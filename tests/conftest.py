"""pytest fixtures for redis-bloomfilter tests."""

from __future__ import annotations

import os

# Set environment variables BEFORE any imports
os.environ.setdefault("BLOOMFILTER_REDIS_URL", "redis://localhost:6379/0")

from fnmatch import fnmatchcase
import hashlib
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from redis_bloomfilter.config import FilterConfig


def _key(key: Any) -> str:
    return key.decode("utf-8") if isinstance(key, bytes) else str(key)


class FakePipeline:
    """Queues commands and replays them against a FakeRedis on execute()."""

    def __init__(self, store: "FakeRedis") -> None:
        self._store = store
        self._commands: list[tuple[str, tuple]] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self._commands = []

    def setbit(self, key: Any, offset: int, value: int) -> "FakePipeline":
        self._commands.append(("setbit", (key, offset, value)))
        return self

    def getbit(self, key: Any, offset: int) -> "FakePipeline":
        self._commands.append(("getbit", (key, offset)))
        return self

    def delete(self, *keys: Any) -> "FakePipeline":
        self._commands.append(("delete", keys))
        return self

    async def execute(self) -> list[Any]:
        self._store.pipelines_executed += 1
        results = []
        for name, args in self._commands:
            results.append(await getattr(self._store, name)(*args))
        self._commands = []
        return results


class FakeRedis:
    """In-memory stand-in for the bit commands of redis.asyncio.Redis."""

    def __init__(self) -> None:
        self.bits: dict[str, set[int]] = {}
        self.values: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}
        self.pipelines_executed = 0
        self.getbit_calls = 0

    def _exists(self, key: str) -> bool:
        return key in self.bits or key in self.values

    async def setbit(self, key: Any, offset: int, value: int) -> int:
        bits = self.bits.setdefault(_key(key), set())
        previous = int(offset in bits)
        if value:
            bits.add(offset)
        else:
            bits.discard(offset)
        return previous

    async def getbit(self, key: Any, offset: int) -> int:
        self.getbit_calls += 1
        return int(offset in self.bits.get(_key(key), ()))

    async def set(self, key: Any, value: Any) -> bool:
        self.values[_key(key)] = value
        return True

    async def expire(self, key: Any, seconds: int) -> int:
        name = _key(key)
        if not self._exists(name):
            return 0
        self.ttls[name] = seconds
        return 1

    async def ttl(self, key: Any) -> int:
        name = _key(key)
        if not self._exists(name):
            return -2
        return self.ttls.get(name, -1)

    async def delete(self, *keys: Any) -> int:
        deleted = 0
        for key in keys:
            name = _key(key)
            if self._exists(name):
                deleted += 1
            self.bits.pop(name, None)
            self.values.pop(name, None)
            self.ttls.pop(name, None)
        return deleted

    async def scan_iter(self, match: Optional[str] = None, count: Optional[int] = None):
        for name in sorted(set(self.bits) | set(self.values)):
            if match is None or fnmatchcase(name, match):
                yield name.encode("utf-8")

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    def keys(self) -> set[str]:
        return set(self.bits) | set(self.values)


@pytest.fixture
def fake_redis():
    """In-memory Redis double supporting bit commands and pipelines."""
    return FakeRedis()


@pytest.fixture
def filter_config():
    """Filter sized for 1000 elements at 1% error rate."""
    return FilterConfig(capacity=1000, error_rate=0.01, key_name="__test_bf")


@pytest.fixture
def mock_redis():
    """Mock Redis client for script-driven tests."""
    redis_mock = MagicMock()
    redis_mock.evalsha = AsyncMock(return_value=0)
    redis_mock.script_load = AsyncMock(side_effect=lambda source: _sha(source))
    redis_mock.script_exists = AsyncMock(return_value=[True, True, True])
    redis_mock.info = AsyncMock(return_value={"redis_version": "7.2.4"})
    return redis_mock


def _sha(source: str) -> str:
    return hashlib.sha1(source.encode("utf-8")).hexdigest()
