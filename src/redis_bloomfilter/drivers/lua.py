"""Atomic scaling filter driver.

The whole test-and-set sequence runs inside Redis as one Lua script, so no
other client can interleave with it on the same filter. The scripts follow
Erik Dubbelboer's redis-lua-scaling-bloom-filter.
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as redis
import structlog

from ..config import FilterConfig
from ..core.errors import RemoteCommunicationError
from ..filter.hashing import Element, encode_element
from ..filter.scaling import count_key
from .base import Driver, FilterDriver
from .scripts import ScriptRunner

logger = structlog.get_logger(__name__)

CLEAR_BATCH_SIZE = 100


def _escape_pattern(value: str) -> str:
    """Escape glob metacharacters for SCAN MATCH."""
    for char in ("\\", "*", "?", "[", "]"):
        value = value.replace(char, "\\" + char)
    return value


class LuaDriver(FilterDriver):
    """Scaling Bloom filter executed by server-side Lua scripts."""

    name = Driver.LUA

    def __init__(self, client: redis.Redis, config: FilterConfig) -> None:
        super().__init__(client, config)
        self.scripts = ScriptRunner(client)

    async def load_scripts(self) -> None:
        await self.scripts.ensure_loaded()

    def _args(self, element: Element, ttl: Optional[int] = None) -> list:
        return [
            self.config.capacity,
            self.config.error_rate,
            encode_element(element),
            int(ttl) if ttl and ttl > 0 else 0,
        ]

    async def test_and_set(self, element: Element, ttl: Optional[int] = None) -> bool:
        existed = await self.scripts.run("cas", [self.config.key_name], self._args(element, ttl))
        return int(existed) == 1

    async def set(self, element: Element, ttl: Optional[int] = None) -> bool:
        existed = await self.scripts.run("add", [self.config.key_name], self._args(element, ttl))
        return int(existed) == 1

    async def test(self, element: Element) -> bool:
        found = await self.scripts.run("check", [self.config.key_name], self._args(element))
        return int(found) == 1

    def _is_generation_key(self, key: bytes | str) -> bool:
        if isinstance(key, bytes):
            key = key.decode("utf-8", errors="replace")
        return key[len(self.config.key_name) + 1:].isdigit()

    async def clear(self) -> None:
        """
        Delete the count key and every generation key of the filter.

        Keys are discovered with SCAN and deleted in non-transactional
        pipelined batches. Keys of other filters sharing the prefix are
        left alone.
        """
        pattern = f"{_escape_pattern(self.config.key_name)}:*"
        deleted = 0
        try:
            keys_to_delete: list = [count_key(self.config.key_name)]
            async for key in self.client.scan_iter(match=pattern, count=CLEAR_BATCH_SIZE):
                if not self._is_generation_key(key):
                    continue
                keys_to_delete.append(key)
                if len(keys_to_delete) >= CLEAR_BATCH_SIZE:
                    deleted += await self._delete(keys_to_delete)
                    keys_to_delete = []
            if keys_to_delete:
                deleted += await self._delete(keys_to_delete)
        except redis.RedisError as e:
            raise RemoteCommunicationError("clear", str(e)) from e
        logger.debug("bloomfilter_keys_deleted", key_name=self.config.key_name, keys=deleted)

    async def _delete(self, keys: list) -> int:
        async with self.client.pipeline(transaction=False) as pipe:
            for key in keys:
                pipe.delete(key)
            results = await pipe.execute()
        return sum(int(r) for r in results)
