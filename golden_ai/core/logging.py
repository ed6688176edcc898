"""
Structured logging for the Golden AI gateway.

Two things live here:

- ``configure_logging`` wires structlog for JSON (production) or console
  (development) output, with a processor that scrubs provider credentials
  from every event.
- The request "wide event": a dict built up while a request is handled
  (HTTP metadata, then the AI task and the model that answered) and emitted
  once as the canonical log line when the response is sent.
"""

import logging
import os
import random
import re
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, Processor

_request_event: ContextVar[dict[str, Any]] = ContextVar("request_event")
_request_start: ContextVar[float] = ContextVar("request_start", default=0.0)

# Requests slower than this are always logged; a model fallback chain
# easily exceeds it
SLOW_REQUEST_MS = 5000
# Share of uneventful requests (no AI call, no error, fast) that are logged
SAMPLE_RATE = 0.10

REDACTED = "[REDACTED]"

SECRET_FIELD_NAMES = {"api_key", "apikey", "authorization", "openrouter_api_key", "ai_api_key"}

SECRET_VALUE_PATTERNS = [
    re.compile(r"sk-[A-Za-z0-9_\-]{16,}"),
    re.compile(r"(?i)bearer\s+[A-Za-z0-9_\-.]{8,}"),
]

NOISY_LOGGERS = ("httpx", "httpcore", "openai")


# =============================================================================
# Credential scrubbing
# =============================================================================

def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        for pattern in SECRET_VALUE_PATTERNS:
            value = pattern.sub(REDACTED, value)
        return value
    if isinstance(value, dict):
        return {
            k: REDACTED if str(k).lower() in SECRET_FIELD_NAMES and v else _scrub(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_scrub(v) for v in value]
    return value


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor masking API keys and bearer tokens anywhere in the event.

    Provider error bodies are logged verbatim and some providers echo the
    submitted key back.
    """
    return _scrub(event_dict)


# =============================================================================
# Wide event
# =============================================================================

def enrich_event(**kwargs: Any) -> None:
    """Merge fields into the current request's wide event.

    Dotted keys address nested objects:

        enrich_event(**{"ai.model_used": "google/gemma-2-9b-it:free"})
    """
    event = _request_event.get({})
    for key, value in kwargs.items():
        *parents, leaf = key.split(".")
        target = event
        for part in parents:
            target = target.setdefault(part, {})
        target[leaf] = value


def init_request_event(
    request_id: str | None = None,
    method: str = "",
    path: str = "",
    client_ip: str = "",
    user_agent: str = "",
) -> dict[str, Any]:
    """Start the wide event for a request and the duration clock."""
    event = {
        "request_id": request_id or uuid.uuid4().hex[:8],
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "http": {
            "method": method,
            "path": path,
            "client_ip": client_ip,
            "user_agent": user_agent[:200] or None,
        },
        "service": {
            "name": "golden-ai-api",
            "version": os.environ.get("APP_VERSION", "dev"),
            "environment": os.environ.get("ENVIRONMENT", "development"),
        },
    }

    _request_event.set(event)
    _request_start.set(time.perf_counter())
    return event


def finalize_request_event(
    status_code: int,
    error: Exception | None = None,
) -> dict[str, Any]:
    """Stamp status, duration and outcome onto the wide event."""
    event = _request_event.get({})

    event.setdefault("http", {})["status_code"] = status_code
    event["duration_ms"] = int((time.perf_counter() - _request_start.get()) * 1000)
    event["outcome"] = "success" if status_code < 400 else "error"

    if error is not None:
        event["error"] = {
            "type": type(error).__name__,
            "message": str(error)[:500],
            "details": getattr(error, "details", None),
        }

    return event


def should_sample(event: dict[str, Any]) -> bool:
    """Tail sampling: keep failures, slow requests and any request that hit a model."""
    if event.get("http", {}).get("status_code", 200) >= 400:
        return True
    if event.get("duration_ms", 0) > SLOW_REQUEST_MS:
        return True
    if "ai" in event:
        return True
    return random.random() < SAMPLE_RATE


def emit_wide_event(event: dict[str, Any]) -> None:
    """Log the canonical line for a finished request, if sampled."""
    if not should_sample(event):
        return

    log = structlog.get_logger("wide_event")
    status_code = event.get("http", {}).get("status_code", 200)

    if status_code >= 500:
        log.error("request_completed", **event)
    elif status_code >= 400:
        log.warning("request_completed", **event)
    else:
        log.info("request_completed", **event)


def add_request_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor tagging every log entry with the current request id."""
    request_id = _request_event.get({}).get("request_id")
    if request_id:
        event_dict.setdefault("request_id", request_id)
    return event_dict


# =============================================================================
# Setup
# =============================================================================

def configure_logging(json_logs: bool = True, log_level: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        json_logs: JSON lines for production, coloured console otherwise
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_request_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        redact_secrets,
    ]
    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # Request-level lines from the HTTP clients would duplicate the wide event
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
