"""Tests for the rate limiter."""
import time
from unittest.mock import AsyncMock, patch

import pytest

from src.core import redis as redis_module
from src.core.redis import RateLimiter, _memory_store, close_redis, get_redis


class TestRateLimiterMemoryFallback:
    """RateLimiter with Redis unavailable (conftest patches get_redis)."""

    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        results = [
            await RateLimiter.check_rate_limit("user-1", "plan_create", max_requests=3)
            for _ in range(4)
        ]

        assert results == [(True, 1), (True, 2), (True, 3), (False, 4)]

    @pytest.mark.asyncio
    async def test_limits_are_per_action_and_identifier(self):
        await RateLimiter.check_rate_limit("user-1", "plan_create", max_requests=1)

        assert await RateLimiter.check_rate_limit("user-1", "training_log_create", max_requests=1) == (True, 1)
        assert await RateLimiter.check_rate_limit("user-2", "plan_create", max_requests=1) == (True, 1)

    @pytest.mark.asyncio
    async def test_window_expiry_resets_count(self):
        await RateLimiter.check_rate_limit("user-1", "plan_create", max_requests=1)
        key = "ratelimit:plan_create:user-1"
        count, _ = _memory_store[key]
        _memory_store[key] = (count, time.time() - 1)

        assert await RateLimiter.check_rate_limit("user-1", "plan_create", max_requests=1) == (True, 1)

    @pytest.mark.asyncio
    async def test_expired_windows_are_pruned(self):
        _memory_store["ratelimit:plan_create:gone"] = ("4", time.time() - 1)

        await RateLimiter.check_rate_limit("user-1", "plan_create", max_requests=1)

        assert "ratelimit:plan_create:gone" not in _memory_store
        assert "ratelimit:plan_create:user-1" in _memory_store

    @pytest.mark.asyncio
    async def test_disabled(self):
        with patch("src.core.redis.settings.RATE_LIMIT_ENABLED", False):
            for _ in range(5):
                assert await RateLimiter.check_rate_limit("user-1", "plan_create", max_requests=1) == (True, 0)


class TestRateLimiterRedis:

    @pytest.mark.asyncio
    async def test_uses_redis_counter(self):
        redis_client = AsyncMock()
        redis_client.incr.return_value = 1

        with patch("src.core.redis.get_redis", return_value=redis_client):
            allowed, count = await RateLimiter.check_rate_limit("user-1", "plan_create", max_requests=5)

        assert (allowed, count) == (True, 1)
        redis_client.incr.assert_awaited_once_with("ratelimit:plan_create:user-1")
        redis_client.expire.assert_awaited_once_with("ratelimit:plan_create:user-1", 3600)

    @pytest.mark.asyncio
    async def test_redis_over_limit(self):
        redis_client = AsyncMock()
        redis_client.incr.return_value = 6

        with patch("src.core.redis.get_redis", return_value=redis_client):
            allowed, count = await RateLimiter.check_rate_limit("user-1", "plan_create", max_requests=5)

        assert (allowed, count) == (False, 6)
        redis_client.expire.assert_not_awaited()


class TestGetRedis:
    """get_redis is imported before conftest patches it, so these run the real function."""

    @pytest.fixture(autouse=True)
    def fresh_client_state(self, monkeypatch):
        monkeypatch.setattr(redis_module, "_redis_client", None)
        monkeypatch.setattr(redis_module, "_use_memory_fallback", False)

    @pytest.mark.asyncio
    async def test_client_is_created_once(self):
        redis_client = AsyncMock()

        with patch("redis.asyncio.from_url", return_value=redis_client) as from_url:
            first = await get_redis()
            second = await get_redis()

        assert first is redis_client
        assert second is redis_client
        from_url.assert_called_once()
        redis_client.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreachable_redis_falls_back_to_memory(self):
        redis_client = AsyncMock()
        redis_client.ping.side_effect = ConnectionError("refused")

        with patch("redis.asyncio.from_url", return_value=redis_client):
            assert await get_redis() is None
            assert await get_redis() is None

        assert redis_module._use_memory_fallback is True

    @pytest.mark.asyncio
    async def test_close_redis(self):
        redis_client = AsyncMock()
        redis_module._redis_client = redis_client

        await close_redis()

        redis_client.aclose.assert_awaited_once()
        assert redis_module._redis_client is None
