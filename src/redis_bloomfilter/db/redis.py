"""Redis connection management for Bloom filter clients."""

from typing import Optional

import redis.asyncio as redis
import structlog

from redis_bloomfilter.core.errors import RemoteCommunicationError

logger = structlog.get_logger(__name__)


def parse_version(raw: str) -> tuple[int, ...]:
    """Parse a dotted Redis version string, ignoring non-numeric suffixes."""
    parts = []
    for chunk in str(raw).split("."):
        digits = ""
        for char in chunk:
            if not char.isdigit():
                break
            digits += char
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


class RedisClient:
    """
    Thin lifecycle wrapper around ``redis.asyncio.Redis``.

    Filters share one client; bit vectors are fetched as raw bytes so
    ``decode_responses`` stays off.
    """

    def __init__(self, url: str) -> None:
        """
        Initialize Redis client.

        Args:
            url: Redis connection URL (e.g., redis://localhost:6379)
        """
        self.url = url
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Establish connection to Redis."""
        if self._client is None:
            self._client = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=False,
            )
            logger.info("redis_connected", url=self.url)

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("redis_disconnected")

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client, raising error if not connected."""
        if self._client is None:
            raise RemoteCommunicationError("connection", "Redis client not connected")
        return self._client

    async def server_version(self) -> tuple[int, ...]:
        """
        Get the server version advertised by ``INFO server``.

        Returns:
            Version tuple, e.g. (7, 2, 4)

        Raises:
            RemoteCommunicationError: If the INFO call fails
        """
        return await server_version(self.client)


async def server_version(client: redis.Redis) -> tuple[int, ...]:
    try:
        info = await client.info("server")
    except redis.RedisError as e:
        raise RemoteCommunicationError("info", str(e)) from e
    raw = info.get("redis_version", "0")
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return parse_version(raw)


# Global Redis client instance
_redis_client: Optional[RedisClient] = None


async def get_redis_client(url: Optional[str] = None) -> RedisClient:
    """
    Get or create the global Redis client instance.

    Args:
        url: Redis connection URL. Required on first call.

    Returns:
        RedisClient instance
    """
    global _redis_client
    if _redis_client is None:
        if url is None:
            raise RemoteCommunicationError("init", "Redis URL required for first initialization")
        _redis_client = RedisClient(url)
        await _redis_client.connect()
    return _redis_client


async def close_redis_client() -> None:
    """Close the global Redis client connection."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.disconnect()
        _redis_client = None
