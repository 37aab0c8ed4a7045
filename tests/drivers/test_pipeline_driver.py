"""Tests for the non-atomic pipelined driver."""

from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis

from redis_bloomfilter.config import FilterConfig
from redis_bloomfilter.core.errors import RemoteCommunicationError
from redis_bloomfilter.drivers.pipeline import PipelineDriver
from redis_bloomfilter.filter.hashing import offsets_for


@pytest.fixture
def driver(fake_redis, filter_config):
    return PipelineDriver(fake_redis, filter_config)


def test_uses_first_generation_sizing(driver) -> None:
    assert driver.generation.index == 1
    assert (driver.generation.bits, driver.generation.hashes) == (11027, 7)
    assert driver.key == "__test_bf"


@pytest.mark.asyncio
async def test_insert_include_clear(driver, fake_redis) -> None:
    assert await driver.test("asdlol") is False
    assert await driver.test_and_set("asdlol") is False
    assert await driver.test("asdlol") is True

    await driver.clear()

    assert fake_redis.keys() == set()
    assert await driver.test("asdlol") is False


@pytest.mark.asyncio
async def test_bits_written_to_fixed_key(driver, fake_redis) -> None:
    await driver.test_and_set("asdlol")

    expected = set(offsets_for("asdlol", driver.generation.bits, driver.generation.hashes))
    assert fake_redis.bits["__test_bf"] == expected


@pytest.mark.asyncio
async def test_second_insert_reports_duplicate(driver) -> None:
    assert await driver.test_and_set("asdlolol") is False
    assert await driver.test_and_set("asdlolol") is True
    assert await driver.set("asdlolol") is True


@pytest.mark.asyncio
async def test_ttl_applied_on_new_element(driver, fake_redis) -> None:
    await driver.test_and_set("asdlolol", 120)
    assert await fake_redis.ttl("__test_bf") == 120


@pytest.mark.asyncio
async def test_ttl_not_touched_for_duplicate(driver, fake_redis) -> None:
    await driver.test_and_set("asdlolol")
    await driver.test_and_set("asdlolol", 120)
    assert await fake_redis.ttl("__test_bf") == -1


@pytest.mark.asyncio
async def test_include_short_circuits_on_first_unset_bit(driver, fake_redis) -> None:
    assert await driver.test("never-inserted") is False
    assert fake_redis.getbit_calls == 1
    assert fake_redis.pipelines_executed == 0


@pytest.mark.asyncio
async def test_include_batches_remaining_reads(driver, fake_redis) -> None:
    await driver.test_and_set("asdlol")
    pipelines_before = fake_redis.pipelines_executed

    assert await driver.test("asdlol") is True
    assert fake_redis.pipelines_executed == pipelines_before + 1
    assert fake_redis.getbit_calls == driver.generation.hashes


@pytest.mark.asyncio
async def test_no_false_negatives(driver) -> None:
    elements = [f"element-{i}" for i in range(500)]
    for element in elements:
        await driver.test_and_set(element)
    for element in elements:
        assert await driver.test(element) is True


@pytest.mark.asyncio
async def test_false_positive_rate_is_bounded(fake_redis) -> None:
    config = FilterConfig(capacity=1000, error_rate=0.01, key_name="__test_bf_fp")
    driver = PipelineDriver(fake_redis, config)
    for i in range(1000):
        await driver.test_and_set(f"member-{i}")

    false_positives = 0
    trials = 2000
    for i in range(trials):
        if await driver.test(f"stranger-{i}"):
            false_positives += 1

    assert false_positives / trials <= 0.02


@pytest.mark.asyncio
async def test_redis_errors_are_wrapped(filter_config) -> None:
    client = AsyncMock()
    client.getbit.side_effect = redis.ConnectionError("connection refused")
    driver = PipelineDriver(client, filter_config)

    with pytest.raises(RemoteCommunicationError) as excinfo:
        await driver.test("asdlol")
    assert isinstance(excinfo.value.__cause__, redis.ConnectionError)


@pytest.mark.asyncio
async def test_clear_errors_are_wrapped(filter_config) -> None:
    client = AsyncMock()
    client.delete.side_effect = redis.ConnectionError("connection reset")
    driver = PipelineDriver(client, filter_config)

    with pytest.raises(RemoteCommunicationError):
        await driver.clear()
