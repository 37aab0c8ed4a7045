"""Core utilities for the Redis Bloom filter."""

from .errors import (
    BackendSelectionError,
    BloomfilterError,
    ConfigurationError,
    ErrorCode,
    RemoteCommunicationError,
    ScriptNotCachedError,
)

__all__ = [
    "BackendSelectionError",
    "BloomfilterError",
    "ConfigurationError",
    "ErrorCode",
    "RemoteCommunicationError",
    "ScriptNotCachedError",
]
