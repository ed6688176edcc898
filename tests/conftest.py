"""
Pytest configuration and fixtures for Golden AI tests.

Unit tests run without network, database or Redis: the settings store, the
clock, the model provider and the embedding search are replaced by the
fakes below.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import pytest

from golden_ai.services.ai.config_service import AIConfigService, ConfigCache, EnvDefaults
from golden_ai.services.ai.gateway import AIGateway
from golden_ai.services.ai.models import ChatMessage, ModelResponse, SearchHit
from golden_ai.services.settings_store import stringify_setting

ENV_API_KEY = "sk-env-test-key-1234"


# =============================================================================
# Fakes
# =============================================================================

class FakeSettingsStore:
    """In-memory settings store; values are kept as the JSON the table holds."""

    def __init__(self, values: Mapping[str, Any] | None = None, fail: bool = False):
        self.values: dict[str, Any] = dict(values or {})
        self.fail = fail
        self.get_calls = 0
        self.set_calls: list[dict[str, Any]] = []

    async def get_settings(self, keys: Iterable[str]) -> dict[str, str]:
        self.get_calls += 1
        if self.fail:
            raise ConnectionError("settings store unavailable")
        return {
            key: stringify_setting(self.values[key])
            for key in keys
            if self.values.get(key) is not None
        }

    async def set_settings(self, values: Mapping[str, Any]) -> None:
        self.set_calls.append(dict(values))
        self.values.update(values)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class ProviderCall:
    base_url: str
    api_key: str
    model: str
    messages: list[ChatMessage]
    temperature: float
    max_tokens: int


class ScriptedProvider:
    """ChatProvider double answering from its script."""

    def __init__(self, script: "ProviderScript", base_url: str, api_key: str):
        self.script = script
        self.base_url = base_url
        self.api_key = api_key

    async def __aenter__(self) -> "ScriptedProvider":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.script.closed += 1

    async def call_model(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
    ) -> ModelResponse:
        self.script.calls.append(
            ProviderCall(self.base_url, self.api_key, model, list(messages), temperature, max_tokens)
        )
        return self.script.responses.get(model, self.script.default)


class ProviderScript:
    """Provider factory with a per-model response table.

    Models without an entry fail with ``default``.
    """

    def __init__(self, responses: Mapping[str, ModelResponse] | None = None):
        self.responses: dict[str, ModelResponse] = dict(responses or {})
        self.default = ModelResponse(content="", error="503 - model unavailable")
        self.calls: list[ProviderCall] = []
        self.created = 0
        self.closed = 0

    def __call__(self, base_url: str, api_key: str) -> ScriptedProvider:
        self.created += 1
        return ScriptedProvider(self, base_url, api_key)

    def reply(self, model: str, content: str) -> None:
        self.responses[model] = ModelResponse(content=content)

    def fail(self, model: str, error: str) -> None:
        self.responses[model] = ModelResponse(content="", error=error)

    @property
    def models_called(self) -> list[str]:
        return [call.model for call in self.calls]

    @property
    def last_call(self) -> ProviderCall:
        return self.calls[-1]


class FakeSearch:
    """Embedding search double."""

    def __init__(self, hits: list[SearchHit] | None = None, fail: bool = False):
        self.hits = hits or []
        self.fail = fail
        self.queries: list[tuple[str, int, float]] = []

    async def search(self, query: str, limit: int = 3, threshold: float = 0.4) -> list[SearchHit]:
        self.queries.append((query, limit, threshold))
        if self.fail:
            raise RuntimeError("search backend down")
        return self.hits[:limit]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FakeSettingsStore:
    return FakeSettingsStore()


@pytest.fixture
def env() -> EnvDefaults:
    return EnvDefaults(api_key=ENV_API_KEY)


@pytest.fixture
def config_service(store: FakeSettingsStore, env: EnvDefaults, clock: FakeClock) -> AIConfigService:
    return AIConfigService(store=store, env=env, cache=ConfigCache(clock=clock))


@pytest.fixture
def provider() -> ProviderScript:
    return ProviderScript()


@pytest.fixture
def gateway(config_service: AIConfigService, provider: ProviderScript) -> AIGateway:
    return AIGateway(config_service, provider_factory=provider)


@pytest.fixture
def search() -> FakeSearch:
    return FakeSearch()
