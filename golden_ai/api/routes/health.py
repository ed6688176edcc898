"""
Health check endpoints.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from golden_ai.core.config import settings
from golden_ai.core.rate_limiter import get_rate_limiter
from golden_ai.db import check_database_health

router = APIRouter()


@router.get("/api/health")
async def health_check() -> dict:
    """Basic health check."""
    return {"status": "healthy", "version": settings.app_version}


@router.get("/api/ready")
async def readiness_check() -> JSONResponse:
    """Readiness check - includes settings database connectivity."""
    database_ok = await check_database_health()
    return JSONResponse(
        status_code=200 if database_ok else 503,
        content={
            "status": "ready" if database_ok else "degraded",
            "database": "connected" if database_ok else "unavailable",
            "rate_limiter": "enabled" if get_rate_limiter() is not None else "disabled",
        },
    )
