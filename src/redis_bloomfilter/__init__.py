"""Scaling Bloom filter stored in Redis."""

from .bloomfilter import Bloomfilter
from .config import FilterConfig, Settings, get_settings, load_settings
from .core.errors import (
    BackendSelectionError,
    BloomfilterError,
    ConfigurationError,
    ErrorCode,
    RemoteCommunicationError,
    ScriptNotCachedError,
)
from .db.redis import RedisClient
from .drivers import Driver, FilterDriver, LuaDriver, PipelineDriver

__version__ = "1.1.0"


def version() -> str:
    return f"redis-bloomfilter version {__version__}"


__all__ = [
    "BackendSelectionError",
    "Bloomfilter",
    "BloomfilterError",
    "ConfigurationError",
    "Driver",
    "ErrorCode",
    "FilterConfig",
    "FilterDriver",
    "LuaDriver",
    "PipelineDriver",
    "RedisClient",
    "RemoteCommunicationError",
    "ScriptNotCachedError",
    "Settings",
    "__version__",
    "get_settings",
    "load_settings",
    "version",
]
