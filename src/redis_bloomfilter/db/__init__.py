"""Redis client helpers."""

from .redis import RedisClient, close_redis_client, get_redis_client, parse_version, server_version

__all__ = [
    "RedisClient",
    "close_redis_client",
    "get_redis_client",
    "parse_version",
    "server_version",
]
