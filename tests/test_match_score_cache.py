"""
Tests for match score caching.
"""

import asyncio

from job_match_cache.entities import MatchScoreEntity
from job_match_cache.repositories import RedisCacheRepository
from job_match_cache.services import CacheService, MatchScoreCache, match_score_key, user_match_prefix
from job_match_cache.services.match_score_cache import job_id_from_key

STRONG = MatchScoreEntity(score=85, matched_skills=["python"], missing_skills=["go"], recommendation="Apply")
WEAK = MatchScoreEntity(score=30, matched_skills=[], missing_skills=["rust", "c++"])


def test_key_format():
    assert match_score_key("user-1", "job-9") == "match:user-1:job-9"
    assert user_match_prefix("user-1") == "match:user-1:"


def test_keys_escape_delimiters():
    key = match_score_key("a:b", "c")
    assert key != match_score_key("a", "b:c")
    assert key.startswith(user_match_prefix("a:b"))
    assert not key.startswith(user_match_prefix("a"))
    assert job_id_from_key(match_score_key("u", "acme:42/remote")) == "acme:42/remote"


def test_set_one_then_get_one(match_cache):
    async def scenario():
        await match_cache.set_one("u1", "job-1", STRONG)
        return await match_cache.get_one("u1", "job-1"), await match_cache.get_one("u1", "job-2")

    hit, miss = asyncio.run(scenario())
    assert hit == STRONG
    assert miss is None


def test_scores_expire_after_ttl(match_cache, clock):
    async def scenario():
        await match_cache.set_one("u1", "job-1", STRONG)
        await match_cache.set_one("u1", "job-2", WEAK, ttl_seconds=10)
        clock.advance(11)
        short = await match_cache.get_one("u1", "job-2")
        clock.advance(1800)
        default = await match_cache.get_one("u1", "job-1")
        return short, default

    assert asyncio.run(scenario()) == (None, None)


def test_zero_ttl_is_not_served(match_cache, cache_service):
    async def scenario():
        await match_cache.set_one("u1", "job-1", STRONG, ttl_seconds=0)
        await match_cache.set_many("u1", {"job-2": WEAK}, ttl_seconds=0)
        return await match_cache.get_many("u1", ["job-1", "job-2"])

    assert asyncio.run(scenario()) == {}
    assert MatchScoreCache(cache_service, ttl_seconds=0).ttl_seconds == 0


def test_get_many_partial_hit(match_cache):
    async def scenario():
        await match_cache.set_many("u1", {"job-1": STRONG, "job-3": WEAK})
        return await match_cache.get_many("u1", ["job-1", "job-2", "job-3", "job-4"])

    assert asyncio.run(scenario()) == {"job-1": STRONG, "job-3": WEAK}


def test_get_many_with_delimiters_in_job_ids(match_cache):
    async def scenario():
        await match_cache.set_many("u:1", {"linkedin:123": STRONG})
        return await match_cache.get_many("u:1", ["linkedin:123"])

    assert asyncio.run(scenario()) == {"linkedin:123": STRONG}


def test_get_many_empty_list(match_cache):
    assert asyncio.run(match_cache.get_many("u1", [])) == {}


def test_invalidate_user_only_clears_that_user(match_cache):
    async def scenario():
        await match_cache.set_many("u1", {"job-1": STRONG, "job-2": WEAK})
        await match_cache.set_one("u11", "job-1", STRONG)
        await match_cache.set_one("u2", "job-1", WEAK)
        removed = await match_cache.invalidate_user("u1")
        return (
            removed,
            await match_cache.get_many("u1", ["job-1", "job-2"]),
            await match_cache.get_one("u11", "job-1"),
            await match_cache.get_one("u2", "job-1"),
        )

    removed, u1, u11, u2 = asyncio.run(scenario())
    assert removed == 2
    assert u1 == {}
    assert u11 == STRONG
    assert u2 == WEAK


def test_invalidate_user_without_scores(match_cache):
    assert asyncio.run(match_cache.invalidate_user("nobody")) == 0


def test_malformed_cached_value_is_a_miss(match_cache, cache_service):
    async def scenario():
        await cache_service.set(match_score_key("u1", "job-1"), {"score": 140}, ttl_seconds=60)
        await cache_service.set(match_score_key("u1", "job-2"), "not a score", ttl_seconds=60)
        await match_cache.set_one("u1", "job-3", WEAK)
        return (
            await match_cache.get_one("u1", "job-1"),
            await match_cache.get_many("u1", ["job-1", "job-2", "job-3"]),
        )

    single, many = asyncio.run(scenario())
    assert single is None
    assert many == {"job-3": WEAK}


def test_default_ttl_from_settings(cache_service):
    assert MatchScoreCache(cache_service).ttl_seconds == 1800


def test_store_outage_is_a_miss(down_client, clock):
    cache = MatchScoreCache(CacheService(RedisCacheRepository(redis_client=down_client, clock=clock), clock=clock))

    async def scenario():
        await cache.set_many("u1", {"job-1": STRONG})
        return await cache.get_many("u1", ["job-1"]), await cache.invalidate_user("u1")

    assert asyncio.run(scenario()) == ({}, 0)
