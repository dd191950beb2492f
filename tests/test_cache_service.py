"""
Tests for the generic TTL cache.
"""

import asyncio
import json

from job_match_cache.entities import CacheEntryEntity
from job_match_cache.repositories import RedisCacheRepository
from job_match_cache.services import CacheService


def test_get_returns_stored_value(cache_service):
    async def scenario():
        await cache_service.set("jobs:remote", {"ids": ["a", "b"]}, ttl_seconds=60)
        return await cache_service.get("jobs:remote")

    assert asyncio.run(scenario()) == {"ids": ["a", "b"]}


def test_get_missing_key_returns_none(cache_service):
    assert asyncio.run(cache_service.get("nope")) is None


def test_entry_expires_after_ttl(cache_service, clock):
    async def scenario():
        await cache_service.set("k", "v", ttl_seconds=10)
        before = await cache_service.get("k")
        clock.advance(9.9)
        still = await cache_service.get("k")
        clock.advance(0.2)
        after = await cache_service.get("k")
        many = await cache_service.get_many(["k"])
        return before, still, after, many

    before, still, after, many = asyncio.run(scenario())
    assert before == "v"
    assert still == "v"
    assert after is None
    assert many == {}


def test_entry_at_exact_expiry_is_a_miss(cache_service, clock):
    async def scenario():
        await cache_service.set("k", "v", ttl_seconds=5)
        clock.advance(5)
        return await cache_service.get("k")

    assert asyncio.run(scenario()) is None


def test_set_overwrites_value(cache_service, clock):
    async def scenario():
        await cache_service.set("k", "v1", ttl_seconds=5)
        await cache_service.set("k", "v2", ttl_seconds=100)
        clock.advance(50)
        return await cache_service.get("k")

    # Second write replaced both value and expiry
    assert asyncio.run(scenario()) == "v2"


def test_get_many_returns_only_hits(cache_service, clock):
    async def scenario():
        await cache_service.set_many({"a": 1, "b": 2}, ttl_seconds=60)
        await cache_service.set("short", 3, ttl_seconds=1)
        clock.advance(2)
        return await cache_service.get_many(["a", "b", "short", "missing"])

    assert asyncio.run(scenario()) == {"a": 1, "b": 2}


def test_get_many_empty_keys(cache_service):
    assert asyncio.run(cache_service.get_many([])) == {}


def test_delete(cache_service):
    async def scenario():
        await cache_service.set("k", "v", ttl_seconds=60)
        await cache_service.delete("k")
        await cache_service.delete("never-existed")
        return await cache_service.get("k")

    assert asyncio.run(scenario()) is None


def test_delete_by_prefix_is_literal(cache_service):
    async def scenario():
        await cache_service.set_many(
            {
                "match:u*1:job-1": 1,
                "match:u*1:job-2": 2,
                "match:u11:job-1": 3,
                "match:u[1]:job-1": 4,
            },
            ttl_seconds=60,
        )
        deleted = await cache_service.delete_by_prefix("match:u*1:")
        remaining = await cache_service.get_many(
            ["match:u*1:job-1", "match:u*1:job-2", "match:u11:job-1", "match:u[1]:job-1"]
        )
        return deleted, remaining

    deleted, remaining = asyncio.run(scenario())
    assert deleted == 2
    assert remaining == {"match:u11:job-1": 3, "match:u[1]:job-1": 4}


def test_delete_by_prefix_spans_several_batches(cache_service):
    async def scenario():
        await cache_service.set_many({f"bulk:{i}": i for i in range(1200)}, ttl_seconds=60)
        await cache_service.set("other", 0, ttl_seconds=60)
        deleted = await cache_service.delete_by_prefix("bulk:")
        return deleted, await cache_service.get_stats()

    deleted, stats = asyncio.run(scenario())
    assert deleted == 1200
    assert stats == {"total_entries": 1}


def test_stats_counts_only_namespace(cache_service, redis_client):
    async def scenario():
        await redis_client.set("unrelated", "x")
        await cache_service.set("a", 1, ttl_seconds=60)
        await cache_service.set("b", 2, ttl_seconds=60)
        return await cache_service.get_stats()

    assert asyncio.run(scenario()) == {"total_entries": 2}


def test_native_ttl_outlives_logical_expiry(redis_client, clock):
    repository = RedisCacheRepository(redis_client=redis_client, clock=clock)

    async def scenario():
        await repository.upsert(CacheEntryEntity(key="k", value=1, expires_at=clock() + 10))
        raw = await redis_client.get("cache:k")
        return json.loads(raw), await redis_client.pttl("cache:k")

    doc, pttl = asyncio.run(scenario())
    assert doc["key"] == "k"
    assert doc["value"] == 1
    assert pttl > 10_000


def test_undecodable_document_is_a_miss(cache_service, redis_client):
    async def scenario():
        await redis_client.set("cache:broken", "not json")
        return await cache_service.get("broken")

    assert asyncio.run(scenario()) is None


def test_unserializable_value_is_not_stored(cache_service):
    async def scenario():
        await cache_service.set("k", object(), ttl_seconds=60)
        return await cache_service.get("k")

    assert asyncio.run(scenario()) is None


def test_store_outage_reads_miss_and_writes_are_dropped(down_client, clock):
    cache_service = CacheService(RedisCacheRepository(redis_client=down_client, clock=clock), clock=clock)

    async def scenario():
        await cache_service.set("k", "v", ttl_seconds=60)
        await cache_service.set_many({"a": 1}, ttl_seconds=60)
        await cache_service.delete("k")
        return (
            await cache_service.get("k"),
            await cache_service.get_many(["a", "b"]),
            await cache_service.delete_by_prefix("a"),
            await cache_service.get_stats(),
            await cache_service.is_healthy(),
        )

    assert asyncio.run(scenario()) == (None, {}, 0, {}, False)


def test_create_factory(redis_client, clock):
    repository = RedisCacheRepository(redis_client=redis_client, namespace="test", clock=clock)
    service = CacheService.create(repository=repository, clock=clock)
    assert service.repository is repository
    assert repository.namespace == "test"
