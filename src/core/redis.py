"""Redis client and request rate limiting."""
import logging
import time

from src.config.settings import settings

logger = logging.getLogger(__name__)

# In-memory fallback for development when Redis is not available
_memory_store: dict[str, tuple[str, float | None]] = {}
_use_memory_fallback = False
_redis_client = None


async def get_redis():
    """Get the shared Redis client, or None when falling back to memory."""
    global _redis_client, _use_memory_fallback

    if _use_memory_fallback:
        return None
    if _redis_client is not None:
        return _redis_client

    try:
        import redis.asyncio as redis

        client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        await client.ping()
        _redis_client = client
        return client
    except Exception as e:
        logger.warning("Redis not available, using in-memory fallback: %s", e)
        _use_memory_fallback = True
        return None


async def close_redis() -> None:
    """Close the shared client on shutdown."""
    global _redis_client

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def _purge_expired(now: float) -> None:
    expired = [key for key, (_, expiry) in _memory_store.items() if expiry and expiry <= now]
    for key in expired:
        del _memory_store[key]


class RateLimiter:
    """Fixed-window rate limiter using Redis or in-memory fallback."""

    RATE_LIMIT_PREFIX = "ratelimit:"

    @classmethod
    async def check_rate_limit(
        cls,
        identifier: str,
        action: str,
        max_requests: int,
        window_seconds: int = 3600,
    ) -> tuple[bool, int]:
        """Check if an action is within rate limits.

        Args:
            identifier: Unique identifier (e.g., user_id)
            action: Action being rate limited (e.g., "plan_create")
            max_requests: Maximum requests allowed in the window
            window_seconds: Time window in seconds (default: 1 hour)

        Returns:
            Tuple of (is_allowed, current_count)
        """
        if not settings.RATE_LIMIT_ENABLED:
            return True, 0

        key = f"{cls.RATE_LIMIT_PREFIX}{action}:{identifier}"
        client = await get_redis()

        if client:
            current = await client.incr(key)
            if current == 1:
                await client.expire(key, window_seconds)
            return current <= max_requests, current

        now = time.time()
        if key in _memory_store:
            data, expiry = _memory_store[key]
            if expiry and now < expiry:
                current = int(data) + 1
                _memory_store[key] = (str(current), expiry)
                return current <= max_requests, current
            del _memory_store[key]

        _purge_expired(now)
        _memory_store[key] = ("1", now + window_seconds)
        return True, 1
