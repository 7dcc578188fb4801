"""RedisPreferenceStore — selection preferences as one JSON blob in Redis.

The blob is read once at startup (``LedgerStore.load``) and rewritten on every
selection change. A missing or unreadable blob loads as ``None`` and the
caller falls back to Overview.
"""

import logging

import redis.asyncio as aioredis
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from config.settings import settings
from src.bk_common.enums import ViewMode
from src.bk_common.errors import PersistenceError
from src.bk_selection.domain.repository import SelectionPreferences

logger = logging.getLogger(__name__)


class _PreferencesBlob(BaseModel):
    view_mode: ViewMode = ViewMode.OVERVIEW
    account_ids: list[str] = Field(default_factory=list)


class RedisPreferenceStore:
    def __init__(
        self,
        client: aioredis.Redis | None = None,
        key: str | None = None,
    ) -> None:
        self._client = client
        self._key = key or settings.PREFERENCES_KEY

    def _redis(self) -> aioredis.Redis:
        if self._client is None:
            self._client = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        return self._client

    async def load(self) -> SelectionPreferences | None:
        try:
            raw = await self._redis().get(self._key)
        except RedisError as exc:
            logger.warning("Preferences unavailable, using overview: %s", exc)
            return None
        if raw is None:
            return None
        try:
            blob = _PreferencesBlob.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("Ignoring malformed preferences blob under %s", self._key)
            return None
        return SelectionPreferences(view_mode=blob.view_mode, account_ids=blob.account_ids)

    async def save(self, prefs: SelectionPreferences) -> None:
        blob = _PreferencesBlob(view_mode=prefs.view_mode, account_ids=prefs.account_ids)
        try:
            await self._redis().set(self._key, blob.model_dump_json())
        except RedisError as exc:
            raise PersistenceError(f"Failed to save preferences: {exc}") from exc

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
