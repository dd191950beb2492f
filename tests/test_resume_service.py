"""
Tests for the resume lifecycle and the assistant chat.
"""

import asyncio

import pytest

from job_match_cache.entities import MatchScoreEntity, ResumeProfileEntity
from job_match_cache.exceptions import RateLimitExceededError, ResumeNotFoundError
from job_match_cache.services import ChatService, ResumeService


@pytest.fixture
def resumes(rate_limiter, profiles, fake_ai, match_cache, clock):
    return ResumeService(
        rate_limiter=rate_limiter,
        profiles=profiles,
        parser=fake_ai,
        match_cache=match_cache,
        clock=clock,
    )


@pytest.fixture
def chat(rate_limiter, fake_ai, profiles):
    return ChatService(rate_limiter=rate_limiter, chat_model=fake_ai, profiles=profiles)


def test_upload_stores_parsed_profile(resumes, clock):
    async def scenario():
        uploaded = await resumes.upload("u1", "cv.pdf", "Python engineer")
        return uploaded, await resumes.get("u1")

    uploaded, stored = asyncio.run(scenario())
    assert uploaded.skills == ["python", "redis"]
    assert uploaded.file_name == "cv.pdf"
    assert uploaded.uploaded_at == clock()
    assert stored == uploaded


def test_upload_with_parser_failure_stores_empty_profile(resumes, fake_ai):
    fake_ai.parse_error = True

    profile = asyncio.run(resumes.upload("u1", "cv.pdf", "Python engineer"))

    assert profile.skills == []
    assert profile.file_name == "cv.pdf"
    assert profile.has_resume is False


def test_upload_blank_text_skips_parser(resumes, fake_ai):
    fake_ai.parse_error = True

    profile = asyncio.run(resumes.upload("u1", "empty.pdf", "   "))

    assert profile == ResumeProfileEntity(file_name="empty.pdf", uploaded_at=profile.uploaded_at)


def test_upload_is_rate_limited(resumes):
    async def scenario():
        await resumes.upload("u1", "a.pdf", "one")
        await resumes.upload("u1", "b.pdf", "two")
        await resumes.upload("u1", "c.pdf", "three")

    with pytest.raises(RateLimitExceededError) as exc_info:
        asyncio.run(scenario())
    assert exc_info.value.endpoint_class == "RESUME_PARSE"


def test_delete_missing_resume(resumes):
    with pytest.raises(ResumeNotFoundError):
        asyncio.run(resumes.delete("u1"))


def test_delete_removes_profile_and_scores(resumes, match_cache):
    async def scenario():
        await resumes.upload("u1", "cv.pdf", "Python engineer")
        await match_cache.set_one("u1", "j1", MatchScoreEntity(score=70))
        await resumes.delete("u1")
        return await resumes.get("u1"), await match_cache.get_one("u1", "j1")

    assert asyncio.run(scenario()) == (None, None)


def test_chat_for_anonymous_caller(chat, fake_ai):
    reply = asyncio.run(chat.reply("203.0.113.7", [{"role": "user", "content": "Tips?"}]))

    assert reply == "Tailor your resume to each posting."
    assert fake_ai.chat_calls == [([{"role": "user", "content": "Tips?"}], None)]


def test_chat_passes_resume_for_signed_in_user(chat, resumes, fake_ai):
    async def scenario():
        await resumes.upload("u1", "cv.pdf", "Python engineer")
        await chat.reply("u1", [{"role": "user", "content": "Review my resume"}], user_id="u1")

    asyncio.run(scenario())
    _, profile = fake_ai.chat_calls[0]
    assert profile.skills == ["python", "redis"]


def test_chat_is_rate_limited_per_identifier(chat):
    messages = [{"role": "user", "content": "hi"}]

    async def scenario():
        for _ in range(3):
            await chat.reply("203.0.113.7", messages)
        await chat.reply("198.51.100.1", messages)
        await chat.reply("203.0.113.7", messages)

    with pytest.raises(RateLimitExceededError):
        asyncio.run(scenario())
