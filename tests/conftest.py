"""
Shared fixtures: an in-process Redis, a controllable clock and fake AI collaborators.
"""

import time

import fakeredis
import pytest
import redis.asyncio as redis
from fakeredis.aioredis import FakeConnection
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

from job_match_cache.config import RateLimitConfig, RateLimitRule
from job_match_cache.entities import JobDescriptorEntity, MatchScoreEntity, ResumeProfileEntity
from job_match_cache.exceptions import ScorerError
from job_match_cache.repositories import (
    RedisCacheRepository,
    RedisProfileRepository,
    RedisRateLimitRepository,
)
from job_match_cache.services import CacheService, MatchScoreCache, RateLimiter


class FakeClock:
    """Manually advanced Unix clock."""

    def __init__(self, start: float | None = None):
        self.now = time.time() if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAI:
    """Stands in for OpenRouterClient in every role it plays."""

    def __init__(self):
        self.scores: dict[str, int] = {}
        self.failing: set[str] = set()
        self.score_calls: list[str] = []
        self.parsed = ResumeProfileEntity(skills=["python", "redis"], summary="Backend engineer")
        self.parse_error = False
        self.chat_calls: list[tuple[list[dict[str, str]], ResumeProfileEntity | None]] = []

    async def calculate_match(self, profile: ResumeProfileEntity, job: JobDescriptorEntity) -> MatchScoreEntity:
        self.score_calls.append(job.job_id)
        if job.job_id in self.failing:
            raise ScorerError(f"model timeout for {job.job_id}")
        matched = [s for s in job.skills if s in profile.skills]
        missing = [s for s in job.skills if s not in profile.skills]
        return MatchScoreEntity(
            score=self.scores.get(job.job_id, 80),
            matched_skills=matched,
            missing_skills=missing,
            recommendation="Apply",
        )

    async def parse_resume(self, text: str) -> ResumeProfileEntity:
        if self.parse_error:
            raise ScorerError("parser unavailable")
        return self.parsed

    async def chat(self, messages, profile=None) -> str:
        self.chat_calls.append((messages, profile))
        return "Tailor your resume to each posting."

    async def is_available(self) -> bool:
        return True


def blocking_fake_client(server: fakeredis.FakeServer, max_connections: int) -> fakeredis.FakeAsyncRedis:
    """Client on a bounded, blocking pool, shaped like ``get_redis_client``."""
    pool = redis.BlockingConnectionPool(
        connection_class=FakeConnection,
        server=server,
        max_connections=max_connections,
        timeout=5,
        decode_responses=True,
    )
    return fakeredis.FakeAsyncRedis(connection_pool=pool)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def server():
    """One fake Redis server; clients built on it share its data."""
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(server):
    return blocking_fake_client(server, max_connections=10)


@pytest.fixture
def small_pool_client(server):
    """Shares ``server`` with ``redis_client`` but holds at most three connections."""
    return blocking_fake_client(server, max_connections=3)


@pytest.fixture
def down_client():
    """Client for a Redis that refuses connections, without reconnect retries."""
    server = fakeredis.FakeServer()
    server.connected = False
    return fakeredis.FakeAsyncRedis(server=server, decode_responses=True, retry=Retry(NoBackoff(), 0))


@pytest.fixture
def cache_service(redis_client, clock):
    return CacheService(RedisCacheRepository(redis_client=redis_client, clock=clock), clock=clock)


@pytest.fixture
def match_cache(cache_service):
    return MatchScoreCache(cache_service, ttl_seconds=1800)


@pytest.fixture
def rate_limit_config():
    return RateLimitConfig(
        rules={
            "AI_SCORING": RateLimitRule(5, 60_000),
            "AI_CHAT": RateLimitRule(3, 60_000),
            "RESUME_PARSE": RateLimitRule(2, 3_600_000),
            "GENERAL": RateLimitRule(100, 60_000),
        }
    )


@pytest.fixture
def rate_limit_store(redis_client):
    return RedisRateLimitRepository(redis_client=redis_client)


@pytest.fixture
def rate_limiter(rate_limit_store, rate_limit_config, clock):
    return RateLimiter(store=rate_limit_store, config=rate_limit_config, clock=clock)


@pytest.fixture
def profiles(redis_client):
    return RedisProfileRepository(redis_client=redis_client)


@pytest.fixture
def fake_ai():
    return FakeAI()
