"""
Per-user ticket view preferences behind a small storage port.
"""

import uuid
from typing import Optional, Protocol

import redis.asyncio as redis
from pydantic import ValidationError

from app.config.redis import get_redis
from app.schemas.preferences import ViewSettings
from app.utils.logging_config import logger


class ViewSettingsStore(Protocol):
    async def load(self, user_id: uuid.UUID) -> Optional[ViewSettings]: ...

    async def save(self, user_id: uuid.UUID, view_settings: ViewSettings) -> None: ...


class RedisViewSettingsStore:
    """Keeps each user's settings as JSON under `view_settings:<user_id>`."""

    key_prefix = "view_settings"

    def __init__(self, client: redis.Redis):
        self._client = client

    def _key(self, user_id: uuid.UUID) -> str:
        return f"{self.key_prefix}:{user_id}"

    async def load(self, user_id: uuid.UUID) -> Optional[ViewSettings]:
        raw = await self._client.get(self._key(user_id))
        if raw is None:
            return None
        try:
            return ViewSettings.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable view settings for {user_id}: {e}")
            return None

    async def save(self, user_id: uuid.UUID, view_settings: ViewSettings) -> None:
        await self._client.set(self._key(user_id), view_settings.model_dump_json())


class InMemoryViewSettingsStore:
    def __init__(self):
        self._data: dict[uuid.UUID, ViewSettings] = {}

    async def load(self, user_id: uuid.UUID) -> Optional[ViewSettings]:
        stored = self._data.get(user_id)
        return stored.model_copy() if stored else None

    async def save(self, user_id: uuid.UUID, view_settings: ViewSettings) -> None:
        self._data[user_id] = view_settings.model_copy()


def get_view_settings_store() -> ViewSettingsStore:
    """FastAPI dependency returning the production store."""
    return RedisViewSettingsStore(get_redis())


async def load_view_settings(store: ViewSettingsStore, user_id: uuid.UUID) -> ViewSettings:
    return await store.load(user_id) or ViewSettings()
