"""Non-atomic fixed-size filter driver for servers without Lua scripting.

Bits are read and written with individual GETBIT/SETBIT commands, batched
into non-transactional pipelines. Nothing isolates one client's batch from
another's: two clients inserting the same element concurrently may both see
a cleared bit and both report a new insertion, and a query racing an insert
may observe a partially written element. The filter does not scale; every
element goes into one vector sized for the configured capacity.
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as redis
import structlog

from ..config import FilterConfig
from ..core.errors import RemoteCommunicationError
from ..filter.hashing import Element, offsets_for
from ..filter.scaling import Generation, generation
from .base import Driver, FilterDriver

logger = structlog.get_logger(__name__)


class PipelineDriver(FilterDriver):
    """Fixed-size Bloom filter stored directly under ``key_name``."""

    name = Driver.PIPELINE

    def __init__(self, client: redis.Redis, config: FilterConfig) -> None:
        super().__init__(client, config)
        self.generation: Generation = generation(config.capacity, config.error_rate, 1)

    @property
    def key(self) -> str:
        return self.config.key_name

    def offsets(self, element: Element) -> list[int]:
        return offsets_for(element, self.generation.bits, self.generation.hashes)

    async def test_and_set(self, element: Element, ttl: Optional[int] = None) -> bool:
        offsets = self.offsets(element)
        try:
            async with self.client.pipeline(transaction=False) as pipe:
                for offset in offsets:
                    pipe.setbit(self.key, offset, 1)
                previous = await pipe.execute()
            found = 0 not in previous
            if not found and ttl and ttl > 0:
                await self.client.expire(self.key, int(ttl))
        except redis.RedisError as e:
            raise RemoteCommunicationError("setbit", str(e)) from e
        return found

    async def set(self, element: Element, ttl: Optional[int] = None) -> bool:
        # With a single vector there are no older generations to probe.
        return await self.test_and_set(element, ttl)

    async def test(self, element: Element) -> bool:
        offsets = self.offsets(element)
        try:
            if await self.client.getbit(self.key, offsets[0]) == 0:
                return False
            async with self.client.pipeline(transaction=False) as pipe:
                for offset in offsets[1:]:
                    pipe.getbit(self.key, offset)
                bits = await pipe.execute()
        except redis.RedisError as e:
            raise RemoteCommunicationError("getbit", str(e)) from e
        return 0 not in bits

    async def clear(self) -> None:
        try:
            deleted = await self.client.delete(self.key)
        except redis.RedisError as e:
            raise RemoteCommunicationError("clear", str(e)) from e
        logger.debug("bloomfilter_keys_deleted", key_name=self.key, keys=deleted)
