"""
Canonical log line per request.

The middleware opens a wide event when a request arrives and emits it once
the response (or exception) is known. Route handlers attach what they did in
between:

    result = await writer.generate_excerpt(title, content)
    add_ai_call_to_wide_event("excerpt", result.model_used, result.error)

The request id is taken from ``X-Request-ID`` when the CMS sends one and is
echoed back on the response so both sides can correlate log lines.
"""

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from golden_ai.core.logging import (
    emit_wide_event,
    enrich_event,
    finalize_request_event,
    init_request_event,
)
from golden_ai.core.rate_limiter import get_client_ip

REQUEST_ID_HEADER = "X-Request-ID"


class WideEventMiddleware(BaseHTTPMiddleware):

    # Probes hit these every few seconds
    SKIP_PATHS = frozenset({"/api/health", "/api/ready", "/favicon.ico"})

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        event = init_request_event(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            method=request.method,
            path=request.url.path,
            client_ip=get_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
        )
        if request.query_params:
            enrich_event(**{"http.query_params": dict(request.query_params)})

        status_code = 500
        error: Exception | None = None
        try:
            response = await call_next(request)
        except Exception as e:
            error = e
            status_code = getattr(e, "status_code", 500)
            raise
        else:
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = event["request_id"]
            return response
        finally:
            emit_wide_event(finalize_request_event(status_code, error))


def add_ai_call_to_wide_event(
    task: str,
    model_used: str | None = None,
    error: str | None = None,
) -> None:
    """Record which AI task ran and which model answered (or why none did)."""
    enrich_event(ai={
        "task": task,
        "model_used": model_used,
        "success": error is None,
        "error": error[:200] if error else None,
    })


def add_profile_to_wide_event(profile_id: str | None = None, action: str | None = None) -> None:
    enrich_event(profile={"id": profile_id, "action": action})
