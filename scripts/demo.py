#!/usr/bin/env python3
"""
Demo script for job match caching.

Runs the cache, the rate limiter and batch scoring against the Redis
configured in the environment. Uses OpenRouter when OPENROUTER_API_KEY is
set, otherwise a keyword-overlap scorer so the demo runs offline.
"""

import asyncio
import time

from job_match_cache.config import RateLimitConfig, RateLimitRule, get_redis_client, settings
from job_match_cache.entities import JobDescriptorEntity, MatchScoreEntity, ResumeProfileEntity
from job_match_cache.exceptions import RateLimitExceededError
from job_match_cache.repositories import (
    OpenRouterClient,
    RedisCacheRepository,
    RedisProfileRepository,
    RedisRateLimitRepository,
)
from job_match_cache.services import CacheService, MatchScoreCache, RateLimiter, ScoringService

DEMO_USER = "demo-user"


class KeywordScorer:
    """Offline stand-in: score is the share of required skills on the resume."""

    async def calculate_match(self, profile: ResumeProfileEntity, job: JobDescriptorEntity) -> MatchScoreEntity:
        await asyncio.sleep(0.2)  # pretend to be a model call
        have = {s.lower() for s in profile.skills}
        matched = [s for s in job.skills if s.lower() in have]
        missing = [s for s in job.skills if s.lower() not in have]
        score = round(100 * len(matched) / len(job.skills)) if job.skills else 50
        return MatchScoreEntity(score=score, matched_skills=matched, missing_skills=missing)


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_cache_ttl(cache: CacheService) -> None:
    """Demonstrate TTL expiry."""
    print_section("Generic Cache With TTL")

    await cache.set("demo:greeting", {"text": "hello"}, ttl_seconds=2)
    print(f"  Immediately:   {await cache.get('demo:greeting')}")
    await asyncio.sleep(2.1)
    print(f"  After 2.1s:    {await cache.get('demo:greeting')}")


async def demo_rate_limit(limiter: RateLimiter) -> None:
    """Demonstrate a small budget being used up."""
    print_section("Rate Limiting (3 requests / 10s)")

    for i in range(1, 6):
        result = await limiter.check_rate_limit(DEMO_USER, "DEMO")
        status = "✓ allowed" if result.success else "✗ rejected"
        print(f"  Request {i}: {status:<10} remaining={result.remaining} reset_at={result.reset_at_datetime:%H:%M:%S}")


async def demo_batch_scoring(scoring: ScoringService, match_cache: MatchScoreCache, jobs: list[JobDescriptorEntity]) -> None:
    """Demonstrate cold and warm batch scoring, then invalidation."""
    print_section("Batch Scoring")

    for label in ("Cold cache", "Warm cache"):
        start = time.perf_counter()
        report = await scoring.score_jobs(DEMO_USER, jobs)
        elapsed = (time.perf_counter() - start) * 1000
        print(f"\n  {label}: {report.cached_count} cached, {report.computed_count} computed in {elapsed:.0f}ms")
        for match in report.matches:
            source = "cache" if match.cached else "model"
            print(f"    {match.job_id:<18} {match.result.score:>3}  ({source})")

    removed = await match_cache.invalidate_user(DEMO_USER)
    print(f"\n  Resume changed: invalidated {removed} cached scores")


async def main() -> None:
    client = get_redis_client()
    if not await client.ping():
        raise SystemExit(f"Redis not reachable at {settings.redis_url}")

    ai = OpenRouterClient.create()
    scorer = ai if await ai.is_available() else KeywordScorer()

    cache = CacheService.create(repository=RedisCacheRepository.create(redis_client=client, namespace="demo-cache"))
    match_cache = MatchScoreCache(cache, ttl_seconds=300)
    profiles = RedisProfileRepository.create(redis_client=client, namespace="demo-profile")
    limiter = RateLimiter(
        store=RedisRateLimitRepository.create(redis_client=client, namespace="demo-ratelimit"),
        config=RateLimitConfig(
            rules={
                "DEMO": RateLimitRule(3, 10_000),
                "AI_SCORING": RateLimitRule(50, 60_000),
            }
        ),
    )
    scoring = ScoringService(rate_limiter=limiter, match_cache=match_cache, profiles=profiles, scorer=scorer)

    await profiles.save(
        DEMO_USER,
        ResumeProfileEntity(skills=["Python", "FastAPI", "Redis", "PostgreSQL"], summary="Backend engineer"),
    )
    jobs = [
        JobDescriptorEntity("backend-python", "Backend Engineer", skills=["Python", "FastAPI", "Redis"]),
        JobDescriptorEntity("platform-go", "Platform Engineer", skills=["Go", "Kubernetes", "Redis"]),
        JobDescriptorEntity("data-engineer", "Data Engineer", skills=["Python", "Spark", "PostgreSQL"]),
    ]

    print_section("Job Match Cache Demo")
    print(f"  Redis:  {settings.redis_url}")
    print(f"  Scorer: {scorer.__class__.__name__}")

    try:
        await demo_cache_ttl(cache)
        await demo_rate_limit(limiter)
        await demo_batch_scoring(scoring, match_cache, jobs)
    except RateLimitExceededError as e:
        print(f"\n  ✗ {e}")
    finally:
        await profiles.delete(DEMO_USER)
        await ai.close()
        await client.aclose()

    print_section("Demo Complete")


if __name__ == "__main__":
    asyncio.run(main())
