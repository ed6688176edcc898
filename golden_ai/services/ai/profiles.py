"""
AI Profile Service

Admin management of provider profiles. Profiles live as a JSON list under
the ``ai_profiles`` setting and at most one is active
(``ai_active_profile_id``). Every write drops the gateway's cached config so
the change takes effect on the next AI call.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from golden_ai.core.exceptions import ResourceNotFoundError, ValidationError
from golden_ai.services.ai.config_service import (
    KEY_ACTIVE_PROFILE_ID,
    KEY_PROFILES,
    AIConfigService,
    split_profiles,
)
from golden_ai.services.ai.models import AIProfile
from golden_ai.services.settings_store import SettingsStore

logger = structlog.get_logger()


def mask_api_key(key: str | None) -> str:
    """Display form of a credential: first and last four characters only."""
    if not key:
        return "Not configured"
    if len(key) < 8:
        return "********"
    return f"{key[:4]}...{key[-4:]}"


def profile_view(profile: AIProfile, active_profile_id: str | None) -> dict[str, Any]:
    """Admin-facing representation with the key masked."""
    return {
        "id": profile.id,
        "name": profile.name,
        "description": profile.description,
        "base_url": profile.base_url,
        "model": profile.model,
        "api_key": mask_api_key(profile.api_key),
        "has_api_key": bool(profile.api_key),
        "updated_at": profile.updated_at,
        "is_active": profile.id == active_profile_id,
    }


@dataclass(frozen=True)
class ProfileState:
    profiles: list[AIProfile]
    active_profile_id: str | None
    rejected_entries: int = 0


class AIProfileService:
    """CRUD and activation of AI provider profiles."""

    def __init__(
        self,
        store: SettingsStore,
        config_service: AIConfigService | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.config_service = config_service
        self.clock = clock

    async def _load(self) -> ProfileState:
        raw = await self.store.get_settings([KEY_PROFILES, KEY_ACTIVE_PROFILE_ID])
        profiles, rejected = split_profiles(raw.get(KEY_PROFILES))
        return ProfileState(
            profiles=profiles,
            active_profile_id=raw.get(KEY_ACTIVE_PROFILE_ID) or None,
            rejected_entries=rejected,
        )

    async def _load_for_write(self) -> ProfileState:
        """Load the list a write will replace; refuse if saving it would drop entries."""
        state = await self._load()
        if state.rejected_entries:
            logger.error("ai_profiles_write_refused", rejected=state.rejected_entries)
            raise ValidationError(
                "Stored AI profiles are malformed; fix the ai_profiles setting before editing profiles",
                {"setting": KEY_PROFILES, "rejected_entries": state.rejected_entries},
            )
        return state

    async def _save(self, values: dict[str, Any]) -> None:
        await self.store.set_settings(values)
        if self.config_service is not None:
            self.config_service.invalidate()

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc)

    def _new_id(self, existing: list[AIProfile]) -> str:
        """Millisecond timestamp, bumped past any id already in use."""
        taken = {p.id for p in existing}
        candidate = int(self.clock() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    @staticmethod
    def _find(profiles: list[AIProfile], profile_id: str) -> AIProfile:
        for profile in profiles:
            if profile.id == profile_id:
                return profile
        raise ResourceNotFoundError(
            f"AI profile '{profile_id}' not found",
            {"profile_id": profile_id},
        )

    async def list_profiles(self) -> dict[str, Any]:
        state = await self._load()
        return {
            "profiles": [profile_view(p, state.active_profile_id) for p in state.profiles],
            "active_profile_id": state.active_profile_id,
        }

    async def get_profile(self, profile_id: str) -> AIProfile:
        state = await self._load()
        return self._find(state.profiles, profile_id)

    async def create_profile(
        self,
        name: str,
        base_url: str,
        model: str,
        api_key: str = "",
        description: str = "",
    ) -> AIProfile:
        """
        Add a profile. The first profile ever created becomes active.

        Raises:
            ValidationError: name, base URL or model is blank
        """
        if not (name.strip() and base_url.strip() and model.strip()):
            raise ValidationError(
                "Vui lòng nhập đầy đủ Tên, Base URL và Model",
                {"required": ["name", "base_url", "model"]},
            )

        state = await self._load_for_write()
        profile = AIProfile(
            id=self._new_id(state.profiles),
            name=name.strip(),
            description=description,
            base_url=base_url.strip(),
            api_key=api_key.strip(),
            model=model.strip(),
            updated_at=self._now(),
        )
        profiles = [*state.profiles, profile]

        values: dict[str, Any] = {KEY_PROFILES: [p.to_storage() for p in profiles]}
        if not state.profiles:
            values[KEY_ACTIVE_PROFILE_ID] = profile.id

        await self._save(values)
        logger.info("ai_profile_created", profile_id=profile.id, name=profile.name, model=profile.model)
        return profile

    async def update_profile(self, profile_id: str, **changes: Any) -> AIProfile:
        """
        Apply a partial update.

        ``None`` values are ignored and a blank ``api_key`` keeps the stored
        key, so the admin form can be saved without re-entering secrets.
        """
        state = await self._load_for_write()
        current = self._find(state.profiles, profile_id)

        updates = {
            field: value.strip() if isinstance(value, str) else value
            for field, value in changes.items()
            if field in ("name", "description", "base_url", "api_key", "model") and value is not None
        }
        if not updates.get("api_key"):
            updates.pop("api_key", None)
        for required in ("name", "base_url", "model"):
            if required in updates and not updates[required]:
                raise ValidationError(f"{required} must not be empty", {"field": required})

        updated = current.model_copy(update={**updates, "updated_at": self._now()})
        profiles = [updated if p.id == profile_id else p for p in state.profiles]

        await self._save({KEY_PROFILES: [p.to_storage() for p in profiles]})
        logger.info("ai_profile_updated", profile_id=profile_id, fields=sorted(updates))
        return updated

    async def delete_profile(self, profile_id: str) -> None:
        state = await self._load_for_write()
        self._find(state.profiles, profile_id)

        values: dict[str, Any] = {
            KEY_PROFILES: [p.to_storage() for p in state.profiles if p.id != profile_id]
        }
        if state.active_profile_id == profile_id:
            values[KEY_ACTIVE_PROFILE_ID] = ""

        await self._save(values)
        logger.info("ai_profile_deleted", profile_id=profile_id)

    async def activate_profile(self, profile_id: str) -> AIProfile:
        state = await self._load()
        profile = self._find(state.profiles, profile_id)

        await self._save({KEY_ACTIVE_PROFILE_ID: profile_id})
        logger.info("ai_profile_activated", profile_id=profile_id, name=profile.name)
        return profile
