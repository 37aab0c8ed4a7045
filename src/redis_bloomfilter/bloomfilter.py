"""Bloom filter facade backed by Redis.

Usage:

    client = redis.asyncio.from_url("redis://localhost:6379")
    bf = await Bloomfilter.create(client, FilterConfig(capacity=1000, error_rate=0.01))
    await bf.insert("asdlol")
    assert await bf.include("asdlol")
    await bf.clear()
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

import redis.asyncio as redis
import structlog

from .config import FilterConfig, get_settings
from .core.errors import BackendSelectionError, ConfigurationError
from .db.redis import RedisClient, server_version
from .drivers.base import Driver, FilterDriver
from .drivers.lua import LuaDriver
from .drivers.pipeline import PipelineDriver
from .filter.hashing import Element
from .observability.metrics import record_operation, track_latency

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_DRIVERS: dict[Driver, type[FilterDriver]] = {
    Driver.LUA: LuaDriver,
    Driver.PIPELINE: PipelineDriver,
}


def _unwrap(client: Union[redis.Redis, RedisClient]) -> redis.Redis:
    if isinstance(client, RedisClient):
        return client.client
    return client


def _validate_ttl(ttl: Optional[int]) -> Optional[int]:
    if ttl is None:
        return None
    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
        raise ConfigurationError("ttl must be a positive number of seconds", {"ttl": ttl})
    return ttl


class Bloomfilter:
    """
    Probabilistic set membership stored in Redis.

    The filter holds only its immutable configuration and the driver chosen
    at construction; all state lives in Redis and is shared by every client
    using the same ``key_name``.

    Attributes:
        config: Filter options
        driver: Driver instance executing the bit operations
    """

    def __init__(
        self,
        client: Union[redis.Redis, RedisClient],
        config: FilterConfig,
        driver: Union[Driver, str] = Driver.LUA,
    ) -> None:
        """
        Build a filter with an explicit driver.

        Args:
            client: Redis connection shared with other filters
            config: Filter options
            driver: ``Driver.LUA`` or ``Driver.PIPELINE``; use ``create`` for
                ``Driver.AUTO``

        Raises:
            BackendSelectionError: If the driver is unknown or unresolved
        """
        selected = Driver.parse(driver)
        if selected is Driver.AUTO:
            raise BackendSelectionError(
                selected.value, "Automatic driver selection requires Bloomfilter.create"
            )
        if not isinstance(config, FilterConfig):
            raise ConfigurationError("config must be a FilterConfig", {"config": repr(config)})
        self._config = config
        self._driver = _DRIVERS[selected](_unwrap(client), config)

    @classmethod
    async def create(
        cls,
        client: Union[redis.Redis, RedisClient],
        config: Optional[FilterConfig] = None,
        driver: Union[Driver, str, None] = None,
    ) -> "Bloomfilter":
        """
        Build a filter, resolving ``Driver.AUTO`` from the server version.

        Without a config or driver the values come from the environment
        settings. Lua scripts are loaded into Redis up front when the atomic
        driver is selected.

        Args:
            client: Redis connection
            config: Filter options
            driver: Driver to use; ``auto`` picks Lua on Redis >= 2.6

        Returns:
            Ready-to-use Bloomfilter
        """
        if config is None:
            config = get_settings().filter_config()
        if driver is None:
            driver = get_settings().driver
        selected = Driver.parse(driver)
        connection = _unwrap(client)
        if selected is Driver.AUTO:
            version = await server_version(connection)
            selected = Driver.for_version(version)
            logger.info(
                "bloomfilter_driver_selected",
                key_name=config.key_name,
                driver=selected.value,
                redis_version=".".join(str(part) for part in version),
            )
        bloomfilter = cls(connection, config, selected)
        if isinstance(bloomfilter._driver, LuaDriver):
            await bloomfilter._driver.load_scripts()
        return bloomfilter

    @property
    def config(self) -> FilterConfig:
        return self._config

    @property
    def driver(self) -> FilterDriver:
        return self._driver

    async def _observe(self, operation: str, call: Callable[..., Awaitable[T]], *args: Any) -> T:
        driver = self._driver.name.value
        with track_latency(operation, driver):
            try:
                result = await call(*args)
            except Exception:
                record_operation(operation, driver, "error")
                raise
        if isinstance(result, bool):
            record_operation(operation, driver, "present" if result else "absent")
        else:
            record_operation(operation, driver, "ok")
        return result

    async def insert(self, element: Element, ttl: Optional[int] = None) -> bool:
        """
        Check-and-set insert.

        The element is not written again when it is already present in any
        generation, so repeated inserts neither grow the count key nor set
        extra bits.

        Args:
            element: Value to insert
            ttl: Optional expiry in seconds for the written key

        Returns:
            True if the element was already present, False if it was added
        """
        existed = await self._observe(
            "insert", self._driver.test_and_set, element, _validate_ttl(ttl)
        )
        logger.debug("bloomfilter_insert", key_name=self._config.key_name, existed=existed)
        return existed

    async def add(self, element: Element, ttl: Optional[int] = None) -> bool:
        """
        Unchecked insert into the newest generation.

        Cheaper than ``insert`` on a scaled filter, but an element already
        stored in an older generation is written again and counted twice.

        Returns:
            True if every bit in the newest generation was already set
        """
        return await self._observe("add", self._driver.set, element, _validate_ttl(ttl))

    async def include(self, element: Element) -> bool:
        """Return True if the element may be in the set, False if it is not."""
        return await self._observe("include", self._driver.test, element)

    async def clear(self) -> None:
        """Remove every key belonging to the filter."""
        await self._observe("clear", self._driver.clear)
        logger.info("bloomfilter_cleared", key_name=self._config.key_name)
