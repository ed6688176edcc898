"""
Fixtures for API tests.

The app runs without its lifespan (no database or Redis). The gateway,
settings store and embedding search are swapped for the in-memory fakes
from the top-level conftest through ``app.dependency_overrides``.
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from golden_ai.api.deps import get_ai_gateway, get_embedding_search, get_settings_store
from golden_ai.api.main import app


@pytest_asyncio.fixture(scope="function")
async def client(gateway, store, search) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app with fake dependencies."""
    app.dependency_overrides[get_ai_gateway] = lambda: gateway
    app.dependency_overrides[get_settings_store] = lambda: store
    app.dependency_overrides[get_embedding_search] = lambda: search

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
