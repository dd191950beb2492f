"""
Tests for scoring orchestration: rate limiting, cache reuse, fallbacks and invalidation.
"""

import asyncio

import pytest

from job_match_cache.entities import JobDescriptorEntity, MatchScoreEntity, ResumeProfileEntity
from job_match_cache.exceptions import RateLimitExceededError
from job_match_cache.repositories import RedisCacheRepository
from job_match_cache.services import CacheService, MatchScoreCache, ResumeService, ScoringService
from job_match_cache.services.scoring_service import FALLBACK_RECOMMENDATION, NO_RESUME_RECOMMENDATION

PROFILE = ResumeProfileEntity(skills=["python", "redis"], summary="Backend engineer")


def job(job_id: str, *skills: str) -> JobDescriptorEntity:
    return JobDescriptorEntity(job_id=job_id, title=f"Engineer {job_id}", skills=list(skills))


@pytest.fixture
def scoring(rate_limiter, match_cache, profiles, fake_ai):
    return ScoringService(
        rate_limiter=rate_limiter,
        match_cache=match_cache,
        profiles=profiles,
        scorer=fake_ai,
        neutral_score=50,
        max_batch_jobs=20,
    )


@pytest.fixture
def resumes(rate_limiter, profiles, fake_ai, match_cache, clock):
    return ResumeService(
        rate_limiter=rate_limiter,
        profiles=profiles,
        parser=fake_ai,
        match_cache=match_cache,
        clock=clock,
    )


def test_no_resume_returns_neutral_scores(scoring, fake_ai):
    async def scenario():
        return await scoring.score_jobs("u1", [job("j1", "python", "go"), job("j2")])

    report = asyncio.run(scenario())
    assert report.has_resume is False
    assert [m.result.score for m in report.matches] == [50, 50]
    assert report.matches[0].result.missing_skills == ["python", "go"]
    assert report.matches[0].result.recommendation == NO_RESUME_RECOMMENDATION
    assert fake_ai.score_calls == []


def test_single_job_miss_then_hit(scoring, profiles, fake_ai):
    async def scenario():
        await profiles.save("u1", PROFILE)
        first = await scoring.score_job("u1", job("j1", "python", "go"))
        second = await scoring.score_job("u1", job("j1", "python", "go"))
        return first, second

    first, second = asyncio.run(scenario())
    assert first.matches[0].cached is False
    assert first.matches[0].result.matched_skills == ["python"]
    assert second.matches[0].cached is True
    assert second.matches[0].result == first.matches[0].result
    assert fake_ai.score_calls == ["j1"]


def test_batch_scores_only_misses_and_keeps_order(scoring, profiles, match_cache, fake_ai):
    cached = MatchScoreEntity(score=91, matched_skills=["python"])

    async def scenario():
        await profiles.save("u1", PROFILE)
        await match_cache.set_one("u1", "j2", cached)
        return await scoring.score_jobs("u1", [job("j3"), job("j2"), job("j1")])

    report = asyncio.run(scenario())
    assert [m.job_id for m in report.matches] == ["j3", "j2", "j1"]
    assert report.matches[1].result == cached
    assert report.cached_count == 1
    assert report.computed_count == 2
    assert sorted(fake_ai.score_calls) == ["j1", "j3"]


def test_batch_failure_is_isolated_and_not_cached(scoring, profiles, match_cache, fake_ai):
    fake_ai.failing = {"j2"}

    async def scenario():
        await profiles.save("u1", PROFILE)
        report = await scoring.score_jobs("u1", [job("j1"), job("j2", "kotlin"), job("j3")])
        stored = await match_cache.get_many("u1", ["j1", "j2", "j3"])
        return report, stored

    report, stored = asyncio.run(scenario())
    failed = report.matches[1]
    assert failed.fallback is True
    assert failed.result.score == 50
    assert failed.result.missing_skills == ["kotlin"]
    assert failed.result.recommendation == FALLBACK_RECOMMENDATION
    assert [m.fallback for m in report.matches] == [False, True, False]
    assert set(stored) == {"j1", "j3"}


def test_batch_is_truncated_and_deduplicated(rate_limiter, match_cache, profiles, fake_ai):
    scoring = ScoringService(
        rate_limiter=rate_limiter,
        match_cache=match_cache,
        profiles=profiles,
        scorer=fake_ai,
        max_batch_jobs=3,
    )

    async def scenario():
        await profiles.save("u1", PROFILE)
        return await scoring.score_jobs("u1", [job("a"), job("a"), job("b"), job("c")])

    report = asyncio.run(scenario())
    assert [m.job_id for m in report.matches] == ["a", "b"]
    assert sorted(fake_ai.score_calls) == ["a", "b"]


def test_rate_limit_is_checked_before_anything_else(scoring, profiles, fake_ai):
    async def scenario():
        await profiles.save("u1", PROFILE)
        for i in range(5):
            await scoring.score_job("u1", job(f"j{i}"))
        calls_before = list(fake_ai.score_calls)
        with pytest.raises(RateLimitExceededError):
            await scoring.score_jobs("u1", [job("new")])
        return calls_before

    calls_before = asyncio.run(scenario())
    assert fake_ai.score_calls == calls_before


def test_cache_outage_still_scores(rate_limiter, profiles, fake_ai, down_client, clock):
    async def scenario():
        await profiles.save("u1", PROFILE)
        cache = MatchScoreCache(CacheService(RedisCacheRepository(redis_client=down_client, clock=clock), clock=clock))
        scoring = ScoringService(rate_limiter=rate_limiter, match_cache=cache, profiles=profiles, scorer=fake_ai)
        return await scoring.score_jobs("u1", [job("j1"), job("j2")])

    report = asyncio.run(scenario())
    assert report.computed_count == 2
    assert not any(m.fallback for m in report.matches)


def test_resume_upload_invalidates_cached_scores(scoring, resumes, match_cache, fake_ai):
    async def scenario():
        await resumes.upload("u1", "cv.pdf", "Python and Redis engineer")
        await scoring.score_jobs("u1", [job("j1"), job("j2")])
        await match_cache.set_one("u2", "j1", MatchScoreEntity(score=10))

        fake_ai.parsed = ResumeProfileEntity(skills=["rust"])
        await resumes.upload("u1", "cv-v2.pdf", "Rust engineer")
        return (
            await match_cache.get_many("u1", ["j1", "j2"]),
            await match_cache.get_one("u2", "j1"),
            await scoring.score_job("u1", job("j1")),
        )

    after_upload, other_user, rescored = asyncio.run(scenario())
    assert after_upload == {}
    assert other_user == MatchScoreEntity(score=10)
    assert rescored.matches[0].cached is False


def test_resume_delete_invalidates_and_returns_to_neutral(scoring, resumes, match_cache, fake_ai):
    async def scenario():
        await resumes.upload("u1", "cv.pdf", "Python engineer")
        await scoring.score_job("u1", job("j1"))
        await resumes.delete("u1")
        return (
            await match_cache.get_one("u1", "j1"),
            await scoring.score_job("u1", job("j1", "python")),
        )

    cached, report = asyncio.run(scenario())
    assert cached is None
    assert report.has_resume is False
    assert report.matches[0].result.score == 50


def test_read_before_invalidation_may_return_old_score(scoring, resumes, match_cache, fake_ai):
    """A read that completes before invalidation starts can see the old score.

    Invalidation runs after the new resume is saved, so any score read
    after the upload call returns has to be recomputed.
    """

    async def scenario():
        await resumes.upload("u1", "cv.pdf", "Python engineer")
        await scoring.score_job("u1", job("j1"))

        fake_ai.parsed = ResumeProfileEntity(skills=["rust"])
        stale = await match_cache.get_one("u1", "j1")
        await resumes.upload("u1", "cv-v2.pdf", "Rust engineer")
        fresh = await scoring.score_job("u1", job("j1"))
        return stale, fresh

    stale, fresh = asyncio.run(scenario())
    assert stale is not None
    assert fresh.matches[0].cached is False
