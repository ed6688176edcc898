"""
Smoke tests for health endpoints.
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestHealthEndpoints:
    async def test_health_check_returns_healthy(self, client: AsyncClient) -> None:
        response = await client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    async def test_readiness_with_database(self, client: AsyncClient, monkeypatch) -> None:
        async def healthy() -> bool:
            return True

        monkeypatch.setattr("golden_ai.api.routes.health.check_database_health", healthy)

        response = await client.get("/api/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["database"] == "connected"
        assert data["rate_limiter"] in ("enabled", "disabled")

    async def test_readiness_without_database(self, client: AsyncClient, monkeypatch) -> None:
        async def unhealthy() -> bool:
            return False

        monkeypatch.setattr("golden_ai.api.routes.health.check_database_health", unhealthy)

        response = await client.get("/api/ready")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
