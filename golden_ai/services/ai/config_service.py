"""
AI Configuration Service

Resolves which provider, model and credentials the gateway uses, merging
(highest priority first):

1. The active AI profile from the settings store
2. Legacy flat settings (``ai_base_url``, ``ai_model``)
3. Environment variables (``AI_BASE_URL``, ``AI_MODEL``, ``AI_API_KEY``)
4. Hardcoded defaults (OpenRouter free models)

Resolved configs are cached for a few seconds because admins edit settings
while the site is live, and re-reading the store on every AI call is
wasteful.
"""

import json
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

import structlog
from pydantic import ValidationError as PydanticValidationError

from golden_ai.core.config import Settings
from golden_ai.services.ai.models import AIProfile, CompanyInfo, ResolvedConfig
from golden_ai.services.settings_store import SettingsStore

logger = structlog.get_logger()

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"

# Free OpenRouter models, used when no fallback list is configured
DEFAULT_FREE_MODELS: tuple[str, ...] = (
    "google/gemma-2-9b-it:free",
    "meta-llama/llama-3.2-3b-instruct:free",
    "mistralai/mistral-7b-instruct:free",
    "huggingfaceh4/zephyr-7b-beta:free",
    "openchat/openchat-7b:free",
    "nousresearch/nous-capybara-7b:free",
)

DEFAULT_MODEL = DEFAULT_FREE_MODELS[0]

DEFAULT_COMPANY_INFO = CompanyInfo(
    name="Golden Logistics",
    phone="1900-xxx-xxx",
    email="contact@hsvn.online",
)

LEGACY_PROFILE_NAME = "Legacy Settings"

CONFIG_CACHE_TTL_SECONDS = 5.0

# Setting keys
KEY_BASE_URL = "ai_base_url"
KEY_MODEL = "ai_model"
KEY_FALLBACK_MODELS = "ai_fallback_models"
KEY_PROFILES = "ai_profiles"
KEY_ACTIVE_PROFILE_ID = "ai_active_profile_id"
KEY_COMPANY_NAME = "company_name"
KEY_CONTACT_PHONE = "contact_phone"
KEY_CONTACT_EMAIL = "contact_email"

AI_SETTING_KEYS = (
    KEY_BASE_URL,
    KEY_MODEL,
    KEY_FALLBACK_MODELS,
    KEY_PROFILES,
    KEY_ACTIVE_PROFILE_ID,
    KEY_COMPANY_NAME,
    KEY_CONTACT_PHONE,
    KEY_CONTACT_EMAIL,
)


@dataclass(frozen=True)
class EnvDefaults:
    """Provider defaults taken from the process environment."""
    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "EnvDefaults":
        return cls(
            api_key=settings.env_api_key,
            base_url=settings.ai_base_url or None,
            model=settings.ai_model or None,
        )


@dataclass(frozen=True)
class AISettings:
    """Typed view of the AI-related rows in the settings store."""
    base_url: str | None = None
    model: str | None = None
    fallback_models: tuple[str, ...] = DEFAULT_FREE_MODELS
    profiles: tuple[AIProfile, ...] = ()
    active_profile_id: str | None = None
    company_info: CompanyInfo = field(default=DEFAULT_COMPANY_INFO)

    @property
    def active_profile(self) -> AIProfile | None:
        if not self.active_profile_id:
            return None
        for profile in self.profiles:
            if profile.id == self.active_profile_id:
                return profile
        return None


def split_profiles(raw: str | None) -> tuple[list[AIProfile], int]:
    """Validate each stored profile on its own.

    Returns the usable profiles and how many entries were rejected. Text that
    is not a JSON list counts as one rejected entry.
    """
    if not raw:
        return [], 0
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError:
        return [], 1
    if not isinstance(entries, list):
        return [], 1

    profiles: list[AIProfile] = []
    rejected = 0
    for entry in entries:
        try:
            profiles.append(AIProfile.model_validate(entry))
        except PydanticValidationError:
            rejected += 1
    return profiles, rejected


def parse_profiles(raw: str | None) -> list[AIProfile]:
    """Parse the JSON-encoded profile list, skipping malformed entries."""
    profiles, rejected = split_profiles(raw)
    if rejected:
        logger.warning("ai_profiles_entries_skipped", rejected=rejected, kept=len(profiles))
    return profiles


def parse_fallback_models(raw: str | None) -> tuple[str, ...]:
    """Parse the JSON-encoded fallback list; empty or malformed means defaults."""
    if not raw:
        return DEFAULT_FREE_MODELS
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("ai_fallback_models_parse_failed", raw=raw[:100])
        return DEFAULT_FREE_MODELS

    if not isinstance(parsed, list):
        return DEFAULT_FREE_MODELS
    models = tuple(str(m).strip() for m in parsed if isinstance(m, str) and m.strip())
    return models or DEFAULT_FREE_MODELS


def parse_ai_settings(raw: Mapping[str, str]) -> AISettings:
    """Turn the loosely-typed key/value map into an ``AISettings``."""
    return AISettings(
        base_url=raw.get(KEY_BASE_URL) or None,
        model=raw.get(KEY_MODEL) or None,
        fallback_models=parse_fallback_models(raw.get(KEY_FALLBACK_MODELS)),
        profiles=tuple(parse_profiles(raw.get(KEY_PROFILES))),
        active_profile_id=raw.get(KEY_ACTIVE_PROFILE_ID) or None,
        company_info=CompanyInfo(
            name=raw.get(KEY_COMPANY_NAME) or DEFAULT_COMPANY_INFO.name,
            phone=raw.get(KEY_CONTACT_PHONE) or DEFAULT_COMPANY_INFO.phone,
            email=raw.get(KEY_CONTACT_EMAIL) or DEFAULT_COMPANY_INFO.email,
        ),
    )


class ConfigCache:
    """Single-slot cache for the resolved config with a fixed TTL.

    The slot is only ever replaced with a complete immutable object, so
    concurrent readers see either the old or the new config, never a mix.
    """

    def __init__(
        self,
        ttl_seconds: float = CONFIG_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entry: ResolvedConfig | None = None

    def now(self) -> float:
        return self.clock()

    def get(self) -> ResolvedConfig | None:
        entry = self._entry
        if entry is None:
            return None
        if self.clock() - entry.timestamp >= self.ttl_seconds:
            return None
        return entry

    def set(self, config: ResolvedConfig) -> None:
        self._entry = config

    def invalidate(self) -> None:
        self._entry = None


class AIConfigService:
    """Resolves the provider configuration for the gateway."""

    def __init__(
        self,
        store: SettingsStore | None,
        env: EnvDefaults | None = None,
        cache: ConfigCache | None = None,
    ):
        self.store = store
        self.env = env or EnvDefaults()
        self.cache = cache or ConfigCache()

    async def get_config(self) -> ResolvedConfig:
        """Return the config in effect, from cache when still fresh.

        Never raises: if the settings store is unavailable the environment
        and hardcoded defaults are used, and that result is not cached so
        the next call tries the store again.
        """
        cached = self.cache.get()
        if cached is not None:
            return cached

        if self.store is None:
            config = self._resolve(AISettings())
            self.cache.set(config)
            return config

        try:
            raw = await self.store.get_settings(AI_SETTING_KEYS)
        except Exception as e:
            logger.warning("ai_config_store_unavailable", error=str(e))
            return self._resolve(AISettings(), profile_name=None)

        config = self._resolve(parse_ai_settings(raw))
        self.cache.set(config)
        return config

    def invalidate(self) -> None:
        """Drop the cached config so the next call re-reads the store."""
        self.cache.invalidate()

    def _resolve(
        self,
        ai_settings: AISettings,
        profile_name: str | None = LEGACY_PROFILE_NAME,
    ) -> ResolvedConfig:
        base_url = ai_settings.base_url or self.env.base_url or DEFAULT_BASE_URL
        model = ai_settings.model or self.env.model or DEFAULT_MODEL
        api_key = self.env.api_key

        profile = ai_settings.active_profile
        if profile is not None:
            base_url = profile.base_url or base_url
            model = profile.model or model
            # Blank profile key means "use the shared environment key"
            if profile.api_key.strip():
                api_key = profile.api_key
            profile_name = profile.name
            logger.info("ai_config_using_profile", profile=profile.name, model=model)
        elif ai_settings.active_profile_id:
            logger.debug(
                "ai_active_profile_missing",
                active_profile_id=ai_settings.active_profile_id,
            )

        return ResolvedConfig(
            base_url=base_url,
            primary_model=model,
            api_key=api_key or None,
            fallback_models=ai_settings.fallback_models,
            profile_name=profile_name,
            company_info=ai_settings.company_info,
            timestamp=self.cache.now(),
        )
