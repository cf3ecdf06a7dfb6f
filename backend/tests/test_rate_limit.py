"""Tests for the daily per-IP submission limiter."""

from datetime import date, timedelta

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from mortgage_funnel.middleware.exceptions import SubmissionLimitError
from mortgage_funnel.services import rate_limit
from mortgage_funnel.services.rate_limit import KEY_TTL_SECONDS, SubmissionLimiter


class FakeRedis:
    def __init__(self):
        self.counts: dict[str, int] = {}
        self.ttls: dict[str, int] = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        self.ttls[key] = seconds


class BrokenRedis:
    async def incr(self, key):
        raise RedisConnectionError("Connection refused")


class Today:
    def __init__(self, day: date):
        self.day = day

    def __call__(self) -> date:
        return self.day


@pytest.fixture
def fake_redis(monkeypatch):
    client = FakeRedis()

    async def _get_redis():
        return client

    monkeypatch.setattr(rate_limit, "get_redis", _get_redis)
    return client


@pytest.mark.unit
class TestMemoryBackend:

    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        limiter = SubmissionLimiter(limit=2, backend="memory")

        await limiter.check("10.0.0.1")
        await limiter.check("10.0.0.1")
        with pytest.raises(SubmissionLimitError):
            await limiter.check("10.0.0.1")

        assert limiter.count("10.0.0.1") == 2

    @pytest.mark.asyncio
    async def test_new_day_resets_count(self):
        today = Today(date(2026, 3, 1))
        limiter = SubmissionLimiter(limit=1, backend="memory", today=today)
        await limiter.check("10.0.0.1")

        today.day += timedelta(days=1)

        await limiter.check("10.0.0.1")
        assert limiter.count("10.0.0.1") == 1

    @pytest.mark.asyncio
    async def test_old_days_are_pruned(self):
        today = Today(date(2026, 3, 1))
        limiter = SubmissionLimiter(limit=5, backend="memory", today=today)
        await limiter.check("10.0.0.1")

        today.day += timedelta(days=2)
        await limiter.check("10.0.0.2")

        assert "10.0.0.1_2026-03-01" not in limiter._counts
        assert "10.0.0.2_2026-03-03" in limiter._counts

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            SubmissionLimiter(backend="memcached")


@pytest.mark.unit
class TestRedisBackend:

    @pytest.mark.asyncio
    async def test_counts_in_redis(self, fake_redis):
        limiter = SubmissionLimiter(limit=2, backend="redis", today=lambda: date(2026, 3, 1))

        await limiter.check("10.0.0.1")
        await limiter.check("10.0.0.1")
        with pytest.raises(SubmissionLimitError):
            await limiter.check("10.0.0.1")

        key = "landing:submissions:10.0.0.1_2026-03-01"
        assert fake_redis.counts[key] == 3
        assert fake_redis.ttls[key] == KEY_TTL_SECONDS

    @pytest.mark.asyncio
    async def test_fails_open_when_redis_unavailable(self, monkeypatch):
        async def _get_redis():
            return BrokenRedis()

        monkeypatch.setattr(rate_limit, "get_redis", _get_redis)
        limiter = SubmissionLimiter(limit=1, backend="redis")

        for _ in range(3):
            await limiter.check("10.0.0.1")
