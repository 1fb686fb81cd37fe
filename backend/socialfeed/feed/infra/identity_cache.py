"""Redis cache in front of the identity store for author display info."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from socialfeed.feed.domain import models
from socialfeed.feed.domain.stores import IdentityStore
from socialfeed.infra.redis import redis_client
from socialfeed.obs import metrics as obs_metrics
from socialfeed.settings import settings

logger = logging.getLogger(__name__)

_AUTHOR_KEY = "feed:author:{username}"


def _author_key(username: str) -> str:
	return _AUTHOR_KEY.format(username=username)


class CachedIdentityStore:
	"""Read-through cache of display info.

	Cache faults fall through to the wrapped store; faults of the wrapped
	store propagate. Unknown users are not cached.
	"""

	def __init__(self, inner: IdentityStore, client=None, *, ttl_seconds: int | None = None) -> None:
		self._inner = inner
		self._client = client if client is not None else redis_client
		self._ttl = ttl_seconds if ttl_seconds is not None else settings.identity_cache_ttl_seconds

	async def find_display_info(self, username: str) -> Optional[models.DisplayInfo]:
		key = _author_key(username)
		cached = await self._read(key)
		if cached is not None:
			obs_metrics.inc_identity_cache("hit")
			return cached
		obs_metrics.inc_identity_cache("miss")
		info = await self._inner.find_display_info(username)
		if info is not None:
			await self._write(key, info)
		return info

	async def exists(self, username: str) -> bool:
		return await self._inner.exists(username)

	async def _read(self, key: str) -> Optional[models.DisplayInfo]:
		try:
			raw = await self._client.get(key)
		except RedisError:
			obs_metrics.inc_identity_cache("error")
			logger.warning("identity_cache.read_failed", extra={"key": key}, exc_info=True)
			return None
		if not raw:
			return None
		try:
			return models.DisplayInfo.model_validate_json(raw)
		except PydanticValidationError:
			logger.warning("identity_cache.corrupt_entry", extra={"key": key})
			return None

	async def _write(self, key: str, info: models.DisplayInfo) -> None:
		try:
			await self._client.set(key, info.model_dump_json(), ex=self._ttl)
		except RedisError:
			obs_metrics.inc_identity_cache("error")
			logger.warning("identity_cache.write_failed", extra={"key": key}, exc_info=True)
