"""
Settings store access.

The CMS keeps its configuration in a key/value ``settings`` table whose
values are JSON. The AI layer reads a handful of keys from it and the
profile manager writes ``ai_profiles`` / ``ai_active_profile_id`` back.
"""

import json
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from golden_ai.db.models import SettingModel

logger = structlog.get_logger()


class SettingsStore(Protocol):
    """Contract of the persisted settings collaborator."""

    async def get_settings(self, keys: Iterable[str]) -> dict[str, str]:
        """Return the requested keys that exist, values as strings."""
        ...

    async def set_settings(self, values: Mapping[str, Any]) -> None:
        """Upsert the given keys."""
        ...


def stringify_setting(value: Any) -> str:
    """Render a JSON setting value the way the CMS admin form stores it.

    Strings are returned untouched, everything else is serialised back to
    JSON text so that list-valued settings can be parsed again.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


class DatabaseSettingsStore:
    """Settings store backed by the SQLAlchemy ``settings`` table."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory

    async def get_settings(self, keys: Iterable[str]) -> dict[str, str]:
        keys = list(keys)
        async with self.session_factory() as session:
            result = await session.execute(
                select(SettingModel).where(SettingModel.key.in_(keys))
            )
            rows = result.scalars().all()

        return {
            row.key: stringify_setting(row.value)
            for row in rows
            if row.value is not None
        }

    async def set_settings(self, values: Mapping[str, Any]) -> None:
        async with self.session_factory() as session:
            for key, value in values.items():
                row = await session.get(SettingModel, key)
                if row is None:
                    session.add(SettingModel(key=key, value=value))
                else:
                    row.value = value
            await session.commit()

        logger.info("settings_updated", keys=sorted(values))

