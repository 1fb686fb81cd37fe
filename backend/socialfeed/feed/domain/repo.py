"""Async Postgres implementations of the feed read stores."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional
from uuid import UUID

import asyncpg

from socialfeed.feed.domain import models
from socialfeed.feed.domain.exceptions import UpstreamUnavailableError
from socialfeed.feed.domain.stores import Window
from socialfeed.infra.postgres import get_pool

logger = logging.getLogger(__name__)

_INFRA_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

_POST_SELECT = """
	SELECT p.id, p.username, p.content, p.created_at, p.repost_id,
	       l.id AS location_id, l.longitude, l.latitude, l.accuracy,
	       i.id AS image_id, i.format AS image_format, i.width AS image_width,
	       i.height AS image_height, i.tag AS image_tag,
	       COALESCE(
	           (SELECT array_agg(ht.name ORDER BY ht.name)
	            FROM post_hashtags pht
	            JOIN hashtags ht ON ht.id = pht.hashtag_id
	            WHERE pht.post_id = p.id),
	           '{}'
	       ) AS hashtags
	FROM posts p
	LEFT JOIN locations l ON l.id = p.location_id
	LEFT JOIN images i ON i.id = p.image_id
"""

_KEYSET = "(p.created_at, p.id) < (${ts}, ${pid})"
_ORDER = "ORDER BY p.created_at DESC, p.id DESC"


def _row_to_post(row: Mapping[str, Any]) -> models.Post:
	location = None
	if row.get("location_id") is not None:
		location = models.Location(
			longitude=row.get("longitude"),
			latitude=row.get("latitude"),
			accuracy=row.get("accuracy"),
		)
		if location.is_empty():
			location = None
	image = None
	if row.get("image_id") is not None:
		image = models.ImageRef(
			id=row["image_id"],
			format=row["image_format"],
			width=row["image_width"],
			height=row["image_height"],
			tag=row.get("image_tag"),
		)
	return models.Post(
		id=row["id"],
		username=row["username"],
		content=row.get("content") or "",
		created_at=row["created_at"],
		location=location,
		image=image,
		repost_id=row.get("repost_id"),
		hashtags=list(row.get("hashtags") or ()),
	)


class _PoolBacked:
	def __init__(self, pool: Optional[asyncpg.pool.Pool] = None) -> None:
		self._pool = pool

	@asynccontextmanager
	async def _connection(self, operation: str) -> AsyncIterator[asyncpg.Connection]:
		"""Acquire a connection and translate infrastructure faults."""
		try:
			pool = self._pool or await get_pool()
			async with pool.acquire() as conn:
				yield conn
		except _INFRA_ERRORS as exc:
			logger.error("store.unavailable", extra={"operation": operation, "error": type(exc).__name__})
			raise UpstreamUnavailableError() from exc


class PostgresPostStore(_PoolBacked):
	"""Post lookups and the reverse-chronological window queries."""

	async def get_post(self, post_id: UUID) -> models.Post | None:
		async with self._connection("get_post") as conn:
			row = await conn.fetchrow(f"{_POST_SELECT} WHERE p.id = $1", post_id)
		return _row_to_post(row) if row else None

	async def _window(
		self,
		operation: str,
		*,
		joins: str,
		conditions: list[str],
		params: list[object],
		anchor: Optional[models.Post],
		limit: int,
	) -> Window:
		base_where = " AND ".join(conditions) if conditions else "TRUE"
		count_sql = f"SELECT COUNT(*) FROM posts p {joins} WHERE {base_where}"
		page_conditions = list(conditions)
		page_params = list(params)
		if anchor is not None:
			page_params.extend([anchor.created_at, anchor.id])
			page_conditions.append(_KEYSET.format(ts=len(page_params) - 1, pid=len(page_params)))
		page_where = " AND ".join(page_conditions) if page_conditions else "TRUE"
		page_params.append(limit)
		page_sql = f"{_POST_SELECT} {joins} WHERE {page_where} {_ORDER} LIMIT ${len(page_params)}"
		async with self._connection(operation) as conn:
			# count and page read from one snapshot
			async with conn.transaction(isolation="repeatable_read", readonly=True):
				total = await conn.fetchval(count_sql, *params)
				rows = await conn.fetch(page_sql, *page_params)
		return [_row_to_post(row) for row in rows], int(total or 0)

	async def window_global(self, anchor: Optional[models.Post], limit: int) -> Window:
		return await self._window(
			"window_global",
			joins="",
			conditions=[],
			params=[],
			anchor=anchor,
			limit=limit,
		)

	async def window_following(
		self,
		subject_username: str,
		anchor: Optional[models.Post],
		limit: int,
	) -> Window:
		return await self._window(
			"window_following",
			joins="JOIN subscriptions s ON s.following = p.username",
			conditions=["s.follower = $1"],
			params=[subject_username],
			anchor=anchor,
			limit=limit,
		)

	async def window_hashtag(self, tag: str, anchor: Optional[models.Post], limit: int) -> Window:
		return await self._window(
			"window_hashtag",
			joins="JOIN post_hashtags ph ON ph.post_id = p.id JOIN hashtags h ON h.id = ph.hashtag_id",
			conditions=["h.name = $1"],
			params=[tag],
			anchor=anchor,
			limit=limit,
		)

	async def window_user(self, username: str, offset: int, limit: int) -> Window:
		async with self._connection("window_user") as conn:
			async with conn.transaction(isolation="repeatable_read", readonly=True):
				total = await conn.fetchval("SELECT COUNT(*) FROM posts p WHERE p.username = $1", username)
				rows = await conn.fetch(
					f"{_POST_SELECT} WHERE p.username = $1 {_ORDER} OFFSET $2 LIMIT $3",
					username,
					offset,
					limit,
				)
		return [_row_to_post(row) for row in rows], int(total or 0)


class PostgresEngagementStore(_PoolBacked):
	"""Like and comment aggregates."""

	async def count_likes(self, post_id: UUID) -> int:
		async with self._connection("count_likes") as conn:
			value = await conn.fetchval("SELECT COUNT(*) FROM likes WHERE post_id = $1", post_id)
		return int(value or 0)

	async def find_like(self, post_id: UUID, username: str) -> bool:
		async with self._connection("find_like") as conn:
			row = await conn.fetchrow(
				"SELECT 1 FROM likes WHERE post_id = $1 AND username = $2 LIMIT 1",
				post_id,
				username,
			)
		return row is not None

	async def count_comments(self, post_id: UUID) -> int:
		async with self._connection("count_comments") as conn:
			value = await conn.fetchval("SELECT COUNT(*) FROM comments WHERE post_id = $1", post_id)
		return int(value or 0)


class PostgresIdentityStore(_PoolBacked):
	"""Author display attributes."""

	async def find_display_info(self, username: str) -> models.DisplayInfo | None:
		async with self._connection("find_display_info") as conn:
			row = await conn.fetchrow(
				"""
				SELECT u.username, u.nickname,
				       i.id AS image_id, i.format AS image_format, i.width AS image_width,
				       i.height AS image_height, i.tag AS image_tag
				FROM users u
				LEFT JOIN images i ON i.id = u.image_id
				WHERE u.username = $1
				""",
				username,
			)
		if row is None:
			return None
		picture = None
		if row.get("image_id") is not None:
			picture = models.ImageRef(
				id=row["image_id"],
				format=row["image_format"],
				width=row["image_width"],
				height=row["image_height"],
				tag=row.get("image_tag"),
			)
		return models.DisplayInfo(username=row["username"], nickname=row.get("nickname"), picture=picture)

	async def exists(self, username: str) -> bool:
		async with self._connection("user_exists") as conn:
			row = await conn.fetchrow("SELECT 1 FROM users WHERE username = $1", username)
		return row is not None
