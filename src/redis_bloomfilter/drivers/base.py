"""Driver interface shared by the atomic and non-atomic backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

import redis.asyncio as redis

from ..config import FilterConfig
from ..core.errors import BackendSelectionError
from ..filter.hashing import Element

# Lua scripting (EVALSHA) landed in Redis 2.6.0
SCRIPTING_MIN_VERSION = (2, 6, 0)


class Driver(str, Enum):
    """Closed set of execution strategies."""

    AUTO = "auto"
    LUA = "lua"
    PIPELINE = "pipeline"

    @classmethod
    def parse(cls, value: Any) -> "Driver":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise BackendSelectionError(value)

    @classmethod
    def for_version(cls, version: tuple[int, ...]) -> "Driver":
        """Pick the best driver a server of ``version`` supports."""
        return cls.LUA if version >= SCRIPTING_MIN_VERSION else cls.PIPELINE


class FilterDriver(ABC):
    """Performs the bit operations of one filter against Redis."""

    name: Driver

    def __init__(self, client: redis.Redis, config: FilterConfig) -> None:
        self.client = client
        self.config = config

    @abstractmethod
    async def test_and_set(self, element: Element, ttl: Optional[int] = None) -> bool:
        """Insert unless present; return True when the element was already present."""

    @abstractmethod
    async def set(self, element: Element, ttl: Optional[int] = None) -> bool:
        """Insert without probing older generations; True when no bit changed."""

    @abstractmethod
    async def test(self, element: Element) -> bool:
        """Read-only membership test."""

    @abstractmethod
    async def clear(self) -> None:
        """Delete every key owned by the filter."""
