"""
Rate Limiter for the AI endpoints.

Every AI request costs provider quota, so public callers (the copilot chat
widget) and admin content helpers are limited per client with a fixed
window counter.

Uses Redis for distributed rate limiting across multiple workers. Without
Redis, or when Redis errors, requests are allowed.
"""

import structlog
from fastapi import Request
from redis.asyncio import Redis

from golden_ai.core.config import settings
from golden_ai.core.exceptions import RateLimitError

logger = structlog.get_logger()


class RateLimiter:
    """Per-client fixed-window limiter for AI calls.

    One Redis counter per (scope, client) pair, expiring after the window.
    """

    def __init__(self, redis: Redis, ai_rate: int = 20, ai_window: int = 60):
        self.redis = redis
        self.ai_rate = ai_rate
        self.ai_window = ai_window
        self.log = logger.bind(component="rate_limiter")

    async def check_ai_limit(self, client_id: str, scope: str = "ai") -> None:
        """Count this request against the client's budget for ``scope``.

        Raises:
            RateLimitError: the window's budget is spent
        """
        key = f"rate_limit:{scope}:{client_id}"

        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.incr(key)
                await pipe.expire(key, self.ai_window)
                count, _ = await pipe.execute()
        except Exception as e:
            # Redis being down must not take the AI endpoints with it
            self.log.error("redis_rate_limit_error", scope=scope, error=str(e))
            return

        if count > self.ai_rate:
            self.log.warning("rate_limit_exceeded", scope=scope, client_id=client_id, count=count)
            raise RateLimitError(
                "Quá nhiều yêu cầu. Vui lòng thử lại sau.",
                retry_after=self.ai_window,
            )


def get_client_ip(request: Request) -> str:
    """Best guess at the caller's address.

    Each trusted proxy appends one entry to ``X-Forwarded-For``, so the client
    is ``TRUSTED_PROXY_COUNT`` entries from the right. Shorter headers fall
    back to the leftmost entry.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ips = [ip.strip() for ip in forwarded.split(",") if ip.strip()]
        idx = len(ips) - settings.trusted_proxy_count
        return ips[idx] if 0 <= idx < len(ips) else ips[0]

    return request.client.host if request.client else "unknown"


# Created with the Redis connection at startup; stays None without Redis
_rate_limiter: RateLimiter | None = None


def init_rate_limiter(redis: Redis) -> RateLimiter:
    """Initialize the global rate limiter with Redis connection."""
    global _rate_limiter
    _rate_limiter = RateLimiter(
        redis,
        ai_rate=settings.rate_limit_ai_requests,
        ai_window=settings.rate_limit_ai_window,
    )
    return _rate_limiter


def reset_rate_limiter() -> None:
    global _rate_limiter
    _rate_limiter = None


def get_rate_limiter() -> RateLimiter | None:
    """Get the global rate limiter, or None when Redis is not configured."""
    return _rate_limiter
