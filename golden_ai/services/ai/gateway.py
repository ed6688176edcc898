"""
AI Gateway

Main entry point for chat completions with:
- Config resolution from admin-managed profiles (cached)
- Sequential fallback across a prioritised model list
- Response sanitization
- Uniform results naming the model that answered
"""

from collections.abc import Callable, Iterable, Sequence
from functools import partial

import httpx
import structlog

from golden_ai.core.config import Settings
from golden_ai.services.ai.config_service import (
    DEFAULT_BASE_URL,
    AIConfigService,
    ConfigCache,
    EnvDefaults,
)
from golden_ai.services.ai.models import (
    ChatMessage,
    CompletionResult,
    ConnectionTestResult,
    ResolvedConfig,
)
from golden_ai.services.ai.provider import DEFAULT_TIMEOUT_SECONDS, ChatProvider
from golden_ai.services.settings_store import SettingsStore

logger = structlog.get_logger()

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000

PING_MAX_TOKENS = 100

MISSING_API_KEY_ERROR = (
    "AI API key chưa được cấu hình. Vui lòng thêm AI_API_KEY hoặc "
    "OPENROUTER_API_KEY vào environment variables."
)

ProviderFactory = Callable[[str, str], ChatProvider]


def build_candidate_models(
    override_model: str | None,
    primary_model: str | None,
    fallback_models: Iterable[str],
    skip_fallback: bool = False,
) -> list[str]:
    """Ordered, de-duplicated list of models to try.

    Order: per-call override, configured primary model, then the fallback
    list unless ``skip_fallback`` is set.
    """
    candidates: list[str] = []

    def add(model: str | None) -> None:
        if model and model not in candidates:
            candidates.append(model)

    add(override_model)
    add(primary_model)
    if not skip_fallback:
        for model in fallback_models:
            add(model)

    return candidates


def format_exhausted_error(config: ResolvedConfig, errors: Sequence[str]) -> str:
    """Aggregated error once every candidate model has failed."""
    return (
        "Tất cả AI models đều không phản hồi.\n"
        "Cấu hình hiện tại:\n"
        f"- Model: {config.primary_model}\n"
        f"- URL: {config.base_url}\n"
        "\n"
        "Chi tiết lỗi:\n" + "\n".join(errors)
    )


class AIGateway:
    """Chat completion gateway with multi-model fallback.

    Stateless apart from the injected config cache; one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        config_service: AIConfigService,
        provider_factory: ProviderFactory | None = None,
    ):
        """Initialize gateway.

        Args:
            config_service: Resolves base URL, credentials and models
            provider_factory: Builds a ChatProvider for (base_url, api_key)
        """
        self.config_service = config_service
        self.provider_factory = provider_factory or ChatProvider

    async def get_config(self) -> ResolvedConfig:
        return await self.config_service.get_config()

    async def chat_completion(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        skip_fallback: bool = False,
    ) -> CompletionResult:
        """Complete a conversation, falling back across models on failure.

        Args:
            messages: Conversation to send
            model: Model to try before the configured ones
            temperature: Sampling temperature
            max_tokens: Completion token budget
            skip_fallback: Only try the override and primary model

        Returns:
            CompletionResult with content and model_used, or an aggregated error
        """
        config = await self.config_service.get_config()

        if not config.api_key:
            logger.error("ai_api_key_missing", base_url=config.base_url)
            return CompletionResult(content="", error=MISSING_API_KEY_ERROR)

        candidates = build_candidate_models(
            model,
            config.primary_model,
            config.fallback_models,
            skip_fallback=skip_fallback,
        )

        logger.info(
            "ai_completion_start",
            profile=config.profile_name,
            candidates=candidates[:3],
            total_candidates=len(candidates),
        )

        errors: list[str] = []

        async with self.provider_factory(config.base_url, config.api_key) as provider:
            for candidate in candidates:
                result = await provider.call_model(
                    candidate,
                    messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                )

                if result.ok:
                    logger.info(
                        "ai_completion_success",
                        model=candidate,
                        attempts=len(errors) + 1,
                    )
                    return CompletionResult(
                        content=result.content,
                        error=None,
                        model_used=candidate,
                    )

                logger.info("ai_model_failed", model=candidate, error=result.error)
                errors.append(f"[{candidate}]: {result.error or 'Response content is empty'}")

        logger.error("ai_all_models_failed", attempts=len(errors))
        return CompletionResult(content="", error=format_exhausted_error(config, errors))

    async def test_connection(
        self,
        base_url: str | None,
        api_key: str | None,
        model: str,
    ) -> ConnectionTestResult:
        """Send one short ping to an unsaved profile.

        Bypasses stored config and the fallback list entirely.
        """
        if not api_key:
            return ConnectionTestResult(success=False, message="Missing API Key")
        if not model:
            return ConnectionTestResult(success=False, message="Missing model")

        async with self.provider_factory(base_url or DEFAULT_BASE_URL, api_key) as provider:
            result = await provider.call_model(
                model,
                [ChatMessage.user("Ping")],
                temperature=DEFAULT_TEMPERATURE,
                max_tokens=PING_MAX_TOKENS,
            )

        if not result.ok:
            logger.warning("ai_connection_test_failed", model=model, error=result.error)
            return ConnectionTestResult(success=False, message=result.error or "Unknown error")

        return ConnectionTestResult(
            success=True,
            message=f"Connection successful! Response: {result.content}",
        )


def create_ai_gateway(
    settings: Settings,
    store: SettingsStore | None,
    cache: ConfigCache | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AIGateway:
    """Compose a gateway from application settings."""
    config_service = AIConfigService(
        store=store,
        env=EnvDefaults.from_settings(settings),
        cache=cache or ConfigCache(ttl_seconds=settings.ai_config_cache_ttl),
    )
    provider_factory = partial(
        ChatProvider,
        timeout=settings.ai_request_timeout or DEFAULT_TIMEOUT_SECONDS,
        default_headers={
            "HTTP-Referer": settings.site_url,
            "X-Title": settings.site_title,
        },
        http_client=http_client,
    )
    return AIGateway(config_service, provider_factory=provider_factory)
