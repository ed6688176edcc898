"""
OpenAI-compatible chat provider.

Performs exactly one chat completion against one ``{base_url, api_key,
model}`` triple and classifies the outcome. Works with OpenRouter, OpenAI,
Azure-style proxies, local Ollama/vLLM and anything else that speaks
``POST {base_url}/chat/completions``.

Retries are disabled here: the gateway falls back across *different*
models instead of hammering the same one.
"""

import asyncio
from collections.abc import Sequence

import httpx
import openai
import structlog
from openai import AsyncOpenAI

from golden_ai.services.ai.models import ChatMessage, ModelResponse
from golden_ai.services.ai.sanitize import strip_thinking_tags

logger = structlog.get_logger()

# Characters of an error body kept in the diagnostic message
ERROR_BODY_PREVIEW_CHARS = 100

DEFAULT_TIMEOUT_SECONDS = 60.0

EMPTY_CONTENT_ERROR = "Response content is empty"
THINKING_ONLY_ERROR = "Response only contained thinking, no actual content"


class ChatProvider:
    """Client for one OpenAI-compatible endpoint.

    Use as an async context manager so the underlying HTTP connection pool
    is released; a caller-supplied ``http_client`` is left open.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        default_headers: dict[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.default_headers = default_headers or {}
        self._http_client = http_client
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(
                base_url=self.base_url,
                api_key=self.api_key,
                default_headers=self.default_headers,
                timeout=self.timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._http_client is None:
            await self._client.close()
        self._client = None

    async def __aenter__(self) -> "ChatProvider":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def call_model(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
    ) -> ModelResponse:
        """Run one completion and return sanitized content or an error.

        The whole attempt, including a slowly streamed body, is bounded by
        ``timeout``.
        Never raises for provider-side failures.
        """
        client = self._get_client()

        try:
            async with asyncio.timeout(self.timeout):
                response = await client.chat.completions.create(
                    model=model,
                    messages=[m.to_dict() for m in messages],
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
        except TimeoutError:
            logger.warning("ai_model_timeout", model=model, timeout=self.timeout)
            return ModelResponse(content="", error=f"Network error: timed out after {self.timeout:g}s")
        except openai.APIStatusError as e:
            body = e.response.text if e.response is not None else str(e)
            logger.warning(
                "ai_model_http_error",
                model=model,
                status=e.status_code,
                body=body[:ERROR_BODY_PREVIEW_CHARS],
            )
            return ModelResponse(
                content="",
                error=f"{e.status_code} - {body[:ERROR_BODY_PREVIEW_CHARS]}",
            )
        except openai.APIConnectionError as e:
            # Includes APITimeoutError
            logger.warning("ai_model_network_error", model=model, error=str(e))
            return ModelResponse(content="", error=f"Network error: {e}")
        except openai.OpenAIError as e:
            logger.warning("ai_model_invalid_response", model=model, error=str(e))
            return ModelResponse(content="", error=f"Invalid response: {e}")

        content = _first_message_content(response)
        if not content:
            logger.warning("ai_model_empty_content", model=model)
            return ModelResponse(content="", error=EMPTY_CONTENT_ERROR)

        content = strip_thinking_tags(content)
        if not content:
            logger.warning("ai_model_thinking_only", model=model)
            return ModelResponse(content="", error=THINKING_ONLY_ERROR)

        return ModelResponse(content=content)


def _first_message_content(response: object) -> str:
    """``choices[0].message.content`` tolerating missing pieces."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    return content if isinstance(content, str) else ""
