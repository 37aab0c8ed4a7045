"""Tests for the Redis client wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import redis.asyncio as redis

from redis_bloomfilter.core.errors import RemoteCommunicationError
from redis_bloomfilter.db import redis as redis_module
from redis_bloomfilter.db.redis import RedisClient, parse_version, server_version


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("7.2.4", (7, 2, 4)),
        ("2.6.0", (2, 6, 0)),
        ("2.5.12", (2, 5, 12)),
        ("7.4.0-rc1", (7, 4, 0)),
        ("255.255.255", (255, 255, 255)),
    ],
)
def test_parse_version(raw, expected) -> None:
    assert parse_version(raw) == expected


def test_client_property_requires_connection() -> None:
    with pytest.raises(RemoteCommunicationError):
        RedisClient("redis://localhost:6379").client


@pytest.mark.asyncio
async def test_connect_and_disconnect() -> None:
    fake = MagicMock()
    fake.aclose = AsyncMock()
    with patch.object(redis_module.redis, "from_url", return_value=fake) as from_url:
        client = RedisClient("redis://localhost:6379")
        await client.connect()
        await client.connect()

        assert client.client is fake
        from_url.assert_called_once()
        assert from_url.call_args.kwargs["decode_responses"] is False

        await client.disconnect()

    fake.aclose.assert_awaited_once()
    with pytest.raises(RemoteCommunicationError):
        client.client


@pytest.mark.asyncio
async def test_server_version_reads_info() -> None:
    fake = MagicMock()
    fake.info = AsyncMock(return_value={"redis_version": b"6.0.9"})

    assert await server_version(fake) == (6, 0, 9)
    fake.info.assert_awaited_once_with("server")


@pytest.mark.asyncio
async def test_server_version_wraps_errors() -> None:
    fake = MagicMock()
    fake.info = AsyncMock(side_effect=redis.ConnectionError("refused"))

    with pytest.raises(RemoteCommunicationError):
        await server_version(fake)


@pytest.mark.asyncio
async def test_global_client_requires_url_first() -> None:
    await redis_module.close_redis_client()
    with pytest.raises(RemoteCommunicationError):
        await redis_module.get_redis_client()
