"""
Unit tests for the OpenAI-compatible chat provider.

The HTTP layer is replaced with httpx.MockTransport so requests never leave
the process.
"""

import asyncio
import json

import httpx
import pytest

from golden_ai.core.config import Settings
from golden_ai.services.ai.config_service import DEFAULT_FREE_MODELS
from golden_ai.services.ai.gateway import create_ai_gateway
from golden_ai.services.ai.models import ChatMessage
from golden_ai.services.ai.provider import (
    EMPTY_CONTENT_ERROR,
    THINKING_ONLY_ERROR,
    ChatProvider,
)

pytestmark = pytest.mark.asyncio

MESSAGES = [ChatMessage.system("Bạn là trợ lý."), ChatMessage.user("Xin chào")]


def completion_body(content: str | None, model: str = "test/model") -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response | None = None, exc: Exception | None = None):
        self.response = response
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return self.response

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_provider(handler: Recorder, base_url: str = "https://llm.example/v1", **kwargs) -> ChatProvider:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatProvider(base_url, "sk-test-key", http_client=http_client, **kwargs)


class TestCallModel:

    async def test_success_returns_content(self):
        handler = Recorder(httpx.Response(200, json=completion_body("Xin chào quý khách")))

        async with make_provider(handler) as provider:
            result = await provider.call_model("test/model", MESSAGES, temperature=0.3, max_tokens=50)

        assert result.ok
        assert result.content == "Xin chào quý khách"

        request = handler.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://llm.example/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test-key"

        body = handler.last_json
        assert body["model"] == "test/model"
        assert body["temperature"] == 0.3
        assert body["max_tokens"] == 50
        assert body["messages"] == [
            {"role": "system", "content": "Bạn là trợ lý."},
            {"role": "user", "content": "Xin chào"},
        ]

    async def test_trailing_slash_trimmed(self):
        handler = Recorder(httpx.Response(200, json=completion_body("ok")))

        async with make_provider(handler, base_url="https://llm.example/v1/") as provider:
            await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)

        assert str(handler.requests[0].url) == "https://llm.example/v1/chat/completions"

    async def test_thinking_tags_stripped(self):
        handler = Recorder(httpx.Response(200, json=completion_body("<think>draft</think>\nMã HS 8471")))

        async with make_provider(handler) as provider:
            result = await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)

        assert result.content == "Mã HS 8471"

    async def test_http_error_carries_status_and_body(self):
        handler = Recorder(httpx.Response(429, json={"error": {"message": "rate limited"}}))

        async with make_provider(handler) as provider:
            result = await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)

        assert not result.ok
        assert result.error.startswith("429 - ")
        assert "rate limited" in result.error
        assert len(handler.requests) == 1

    async def test_network_error(self):
        handler = Recorder(exc=httpx.ConnectError("connection refused"))

        async with make_provider(handler) as provider:
            result = await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)

        assert not result.ok
        assert result.error.startswith("Network error:")
        assert len(handler.requests) == 1

    async def test_read_timeout_is_network_error(self):
        handler = Recorder(exc=httpx.ReadTimeout("read timed out"))

        async with make_provider(handler) as provider:
            result = await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)

        assert not result.ok
        assert result.error.startswith("Network error:")

    async def test_slow_response_hits_attempt_deadline(self):
        async def stall(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json=completion_body("quá muộn"))

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(stall))
        async with ChatProvider("https://llm.example/v1", "sk-test-key", timeout=0.05, http_client=http_client) as provider:
            result = await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)
        await http_client.aclose()

        assert not result.ok
        assert result.error == "Network error: timed out after 0.05s"

    async def test_null_content_is_empty_error(self):
        handler = Recorder(httpx.Response(200, json=completion_body(None)))

        async with make_provider(handler) as provider:
            result = await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)

        assert result.error == EMPTY_CONTENT_ERROR
        assert result.content == ""

    async def test_no_choices_is_empty_error(self):
        body = completion_body("unused")
        body["choices"] = []
        handler = Recorder(httpx.Response(200, json=body))

        async with make_provider(handler) as provider:
            result = await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)

        assert result.error == EMPTY_CONTENT_ERROR

    async def test_thinking_only_is_error(self):
        handler = Recorder(httpx.Response(200, json=completion_body("<think>just reasoning</think>")))

        async with make_provider(handler) as provider:
            result = await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)

        assert result.error == THINKING_ONLY_ERROR

    async def test_default_headers_sent(self):
        handler = Recorder(httpx.Response(200, json=completion_body("ok")))

        provider = make_provider(
            handler,
            default_headers={"HTTP-Referer": "https://golden.example", "X-Title": "Golden CMS"},
        )
        async with provider:
            await provider.call_model("test/model", MESSAGES, temperature=0.7, max_tokens=10)

        headers = handler.requests[0].headers
        assert headers["HTTP-Referer"] == "https://golden.example"
        assert headers["X-Title"] == "Golden CMS"


class TestCreateGateway:

    async def test_gateway_over_http(self):
        handler = Recorder(httpx.Response(200, json=completion_body("Chào bạn", model="env/model")))
        settings = Settings(
            _env_file=None,
            ai_api_key="sk-env-key",
            ai_base_url="https://llm.example/v1",
            ai_model="env/model",
            site_url="https://golden.example",
            site_title="Golden Logistics",
        )
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

        gateway = create_ai_gateway(settings, store=None, http_client=http_client)
        result = await gateway.chat_completion(MESSAGES)
        await http_client.aclose()

        assert result.content == "Chào bạn"
        assert result.model_used == "env/model"

        request = handler.requests[0]
        assert str(request.url) == "https://llm.example/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-env-key"
        assert request.headers["HTTP-Referer"] == "https://golden.example"
        assert request.headers["X-Title"] == "Golden Logistics"

    @pytest.mark.parametrize("failure", ["read_timeout", "stall"])
    async def test_timed_out_model_falls_back(self, failure):
        async def handler(request: httpx.Request) -> httpx.Response:
            model = json.loads(request.content)["model"]
            if model == "env/model":
                if failure == "read_timeout":
                    raise httpx.ReadTimeout("read timed out", request=request)
                await asyncio.sleep(5)
            return httpx.Response(200, json=completion_body("Đã trả lời", model=model))

        settings = Settings(
            _env_file=None,
            ai_api_key="sk-env-key",
            ai_base_url="https://llm.example/v1",
            ai_model="env/model",
            ai_request_timeout=0.05,
        )
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

        gateway = create_ai_gateway(settings, store=None, http_client=http_client)
        result = await gateway.chat_completion(MESSAGES)
        await http_client.aclose()

        assert result.ok
        assert result.content == "Đã trả lời"
        assert result.model_used == DEFAULT_FREE_MODELS[0]
