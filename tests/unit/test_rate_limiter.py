"""
Unit tests for the AI rate limiter and client IP extraction.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starlette.requests import Request

from golden_ai.core.exceptions import RateLimitError
from golden_ai.core.rate_limiter import RateLimiter, get_client_ip


def make_redis(count: int | None = None, error: Exception | None = None) -> MagicMock:
    """Redis mock whose pipeline returns ``count`` from INCR."""
    pipe = MagicMock()
    pipe.__aenter__ = AsyncMock(return_value=pipe)
    pipe.__aexit__ = AsyncMock(return_value=False)
    pipe.incr = AsyncMock()
    pipe.expire = AsyncMock()
    pipe.execute = AsyncMock(return_value=[count, True], side_effect=error)

    redis = MagicMock()
    redis.pipeline.return_value = pipe
    return redis


def make_request(headers: dict[str, str] | None = None, client: tuple[str, int] | None = ("10.0.0.9", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/v1/ai/chat",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


@pytest.mark.asyncio
class TestRateLimiter:

    async def test_under_limit_allowed(self):
        redis = make_redis(count=20)
        limiter = RateLimiter(redis, ai_rate=20, ai_window=60)

        await limiter.check_ai_limit("1.2.3.4", scope="chat")

        pipe = redis.pipeline.return_value
        pipe.incr.assert_awaited_once_with("rate_limit:chat:1.2.3.4")
        pipe.expire.assert_awaited_once_with("rate_limit:chat:1.2.3.4", 60)

    async def test_over_limit_raises(self):
        limiter = RateLimiter(make_redis(count=21), ai_rate=20, ai_window=60)

        with pytest.raises(RateLimitError) as exc_info:
            await limiter.check_ai_limit("1.2.3.4", scope="content")

        assert exc_info.value.retry_after == 60
        assert exc_info.value.message == "Quá nhiều yêu cầu. Vui lòng thử lại sau."

    async def test_redis_error_allows_request(self):
        limiter = RateLimiter(make_redis(error=ConnectionError("redis down")))

        await limiter.check_ai_limit("1.2.3.4")


class TestGetClientIp:

    def test_direct_client(self):
        assert get_client_ip(make_request()) == "10.0.0.9"

    def test_forwarded_for_uses_trusted_proxy_count(self):
        request = make_request({"X-Forwarded-For": "6.6.6.6, 203.0.113.7"})

        with patch("golden_ai.core.rate_limiter.settings") as mock_settings:
            mock_settings.trusted_proxy_count = 1
            assert get_client_ip(request) == "203.0.113.7"

            mock_settings.trusted_proxy_count = 2
            assert get_client_ip(request) == "6.6.6.6"

    def test_more_proxies_than_entries(self):
        request = make_request({"X-Forwarded-For": "203.0.113.7"})

        with patch("golden_ai.core.rate_limiter.settings") as mock_settings:
            mock_settings.trusted_proxy_count = 3
            assert get_client_ip(request) == "203.0.113.7"

    def test_unknown_client(self):
        assert get_client_ip(make_request(client=None)) == "unknown"
