"""
FastAPI dependencies.

The gateway is a process-wide singleton: its config cache must outlive
individual requests. Tests swap any of these through
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends, Request

from golden_ai.core.config import settings
from golden_ai.core.rate_limiter import get_client_ip, get_rate_limiter
from golden_ai.db import get_db_session
from golden_ai.services.ai.classification import ContentClassifier
from golden_ai.services.ai.copilot import GoldenCopilot
from golden_ai.services.ai.gateway import AIGateway, create_ai_gateway
from golden_ai.services.ai.profiles import AIProfileService
from golden_ai.services.ai.translation import PostTranslator
from golden_ai.services.ai.writing import WritingAssistant
from golden_ai.services.embedding_search import EmbeddingSearchClient
from golden_ai.services.settings_store import DatabaseSettingsStore, SettingsStore


@lru_cache
def get_settings_store() -> SettingsStore:
    return DatabaseSettingsStore(get_db_session)


@lru_cache
def get_ai_gateway() -> AIGateway:
    return create_ai_gateway(settings, get_settings_store())


@lru_cache
def get_embedding_search() -> EmbeddingSearchClient:
    return EmbeddingSearchClient(
        settings.resolved_embedding_search_url,
        timeout=settings.embedding_search_timeout,
    )


def get_writing_assistant(gateway: AIGateway = Depends(get_ai_gateway)) -> WritingAssistant:
    return WritingAssistant(gateway)


def get_classifier(gateway: AIGateway = Depends(get_ai_gateway)) -> ContentClassifier:
    return ContentClassifier(gateway)


def get_translator(gateway: AIGateway = Depends(get_ai_gateway)) -> PostTranslator:
    return PostTranslator(gateway)


def get_copilot(
    gateway: AIGateway = Depends(get_ai_gateway),
    search: EmbeddingSearchClient = Depends(get_embedding_search),
) -> GoldenCopilot:
    return GoldenCopilot(gateway, search)


def get_profile_service(
    store: SettingsStore = Depends(get_settings_store),
    gateway: AIGateway = Depends(get_ai_gateway),
) -> AIProfileService:
    return AIProfileService(store, gateway.config_service)


async def rate_limit_chat(request: Request) -> None:
    """Per-IP budget for the public copilot chat."""
    limiter = get_rate_limiter()
    if limiter is not None:
        await limiter.check_ai_limit(get_client_ip(request), scope="chat")


async def rate_limit_content(request: Request) -> None:
    """Per-client budget for editor-side AI helpers."""
    limiter = get_rate_limiter()
    if limiter is not None:
        await limiter.check_ai_limit(get_client_ip(request), scope="content")
