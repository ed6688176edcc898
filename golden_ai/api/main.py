"""
FastAPI application for the Golden AI gateway.

Run with ``uvicorn golden_ai.api.main:app`` or ``python -m golden_ai.api.main``.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy.exc import SQLAlchemyError

from golden_ai.api.middleware import REQUEST_ID_HEADER, WideEventMiddleware
from golden_ai.api.routes import admin_ai, ai, health
from golden_ai.core.config import settings
from golden_ai.core.exceptions import (
    AIServiceError,
    ExternalServiceError,
    GoldenAIException,
    RateLimitError,
    ResourceNotFoundError,
    ValidationError,
)
from golden_ai.core.logging import configure_logging
from golden_ai.core.rate_limiter import init_rate_limiter, reset_rate_limiter
from golden_ai.db import DatabaseError, close_db, init_db

configure_logging(
    json_logs=not settings.debug,
    log_level="DEBUG" if settings.debug else "INFO",
)

logger = structlog.get_logger()

# exception class -> (status code, error type, log level)
ERROR_MAP: dict[type[GoldenAIException], tuple[int, str, str]] = {
    ValidationError: (400, "validation_error", "info"),
    ResourceNotFoundError: (404, "not_found_error", "info"),
    RateLimitError: (429, "rate_limit_error", "warning"),
    AIServiceError: (500, "ai_error", "error"),
    ExternalServiceError: (502, "external_service_error", "error"),
    GoldenAIException: (500, "application_error", "error"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("golden_ai_api_starting", version=settings.app_version, environment=settings.environment)

    try:
        await init_db()
    except (SQLAlchemyError, OSError) as e:
        # Env and built-in defaults still resolve a working AI config
        logger.warning("settings_database_unavailable", error=str(e))

    redis: Redis | None = None
    if settings.redis_url:
        redis = Redis.from_url(str(settings.redis_url))
        init_rate_limiter(redis)
        logger.info("rate_limiter_enabled", requests=settings.rate_limit_ai_requests, window=settings.rate_limit_ai_window)
    else:
        logger.warning("rate_limiter_disabled", reason="REDIS_URL not set")

    yield

    reset_rate_limiter()
    if redis is not None:
        await redis.aclose()
    await close_db()
    logger.info("golden_ai_api_stopped")


def error_body(message: str, error_type: str, details: object = None) -> dict:
    return {"error": {"message": message, "type": error_type, "details": details}}


def register_exception_handlers(app: FastAPI) -> None:
    """Map application exceptions onto the ``{"error": {...}}`` envelope.

    Starlette resolves handlers along the exception's MRO, so the
    ``GoldenAIException`` entry only catches subclasses without their own.
    """

    async def app_exception_handler(request: Request, exc: GoldenAIException) -> JSONResponse:
        status_code, error_type, level = next(
            ERROR_MAP[cls] for cls in type(exc).__mro__ if cls in ERROR_MAP
        )
        getattr(logger, level)(error_type, path=request.url.path, message=exc.message[:300])

        response = JSONResponse(status_code=status_code, content=error_body(exc.message, error_type, exc.details))
        if isinstance(exc, RateLimitError):
            response.headers["Retry-After"] = str(exc.retry_after)
        return response

    for exc_class in ERROR_MAP:
        app.add_exception_handler(exc_class, app_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        logger.info("request_validation_error", path=request.url.path, errors=errors)
        return JSONResponse(status_code=422, content=error_body("Validation failed", "validation_error", errors))

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
        logger.error("database_error", path=request.url.path, error=exc.message)
        return JSONResponse(status_code=503, content=error_body("Database operation failed", "database_error"))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unexpected_error", path=request.url.path, error=str(exc), exc_info=True)
        message = str(exc) if settings.debug else "An unexpected error occurred"
        return JSONResponse(status_code=500, content=error_body(message, "internal_server_error"))


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="AI gateway and content assistant for the Golden Logistics CMS",
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )
    app.add_middleware(WideEventMiddleware)

    app.include_router(health.router, tags=["Health"])
    app.include_router(ai.router, prefix="/api/v1/ai", tags=["AI"])
    app.include_router(admin_ai.router, prefix="/api/v1/admin/ai", tags=["Admin AI"])

    register_exception_handlers(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("golden_ai.api.main:app", host=settings.host, port=settings.port, reload=settings.debug)
