"""In-memory feed stores used by unit and API tests."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional
from uuid import UUID, uuid4

from socialfeed.feed.domain import models

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryFeedStore:
	"""Post, engagement and identity store over plain dicts.

	Windows follow the ``(created_at DESC, id DESC)`` order and count the
	base query without the anchor, like the Postgres stores.
	"""

	def __init__(self) -> None:
		self.posts: dict[UUID, models.Post] = {}
		self.users: dict[str, models.DisplayInfo] = {}
		self.likes: set[tuple[UUID, str]] = set()
		self.comments: dict[UUID, int] = defaultdict(int)
		self.follows: set[tuple[str, str]] = set()
		self.calls: list[tuple[str, object]] = []
		self.failures: dict[str, Exception] = {}
		self.delays: dict[str, float] = {}
		self.in_flight: dict[str, int] = defaultdict(int)
		self.max_in_flight: dict[str, int] = defaultdict(int)

	# ------------------------------------------------------------------
	# Fixture builders

	def add_user(self, username: str, nickname: Optional[str] = None) -> models.DisplayInfo:
		info = models.DisplayInfo(username=username, nickname=nickname)
		self.users[username] = info
		return info

	def add_post(
		self,
		username: str,
		content: str = "",
		*,
		created_at: Optional[datetime] = None,
		post_id: Optional[UUID] = None,
		repost_of: Optional[models.Post] = None,
		hashtags: Iterable[str] = (),
		image: Optional[models.ImageRef] = None,
		location: Optional[models.Location] = None,
	) -> models.Post:
		post = models.Post(
			id=post_id or uuid4(),
			username=username,
			content=content,
			created_at=created_at or BASE_TIME + timedelta(seconds=len(self.posts)),
			repost_id=repost_of.id if repost_of else None,
			hashtags=list(hashtags),
			image=image,
			location=location,
		)
		self.posts[post.id] = post
		return post

	def delete_post(self, post: models.Post) -> None:
		self.posts.pop(post.id, None)

	def like(self, post: models.Post, *usernames: str) -> None:
		for username in usernames:
			self.likes.add((post.id, username))

	def comment(self, post: models.Post, count: int = 1) -> None:
		self.comments[post.id] += count

	def follow(self, follower: str, following: str) -> None:
		self.follows.add((follower, following))

	def calls_to(self, operation: str) -> list[object]:
		return [arg for name, arg in self.calls if name == operation]

	async def _enter(self, operation: str, arg: object) -> None:
		self.calls.append((operation, arg))
		self.in_flight[operation] += 1
		self.max_in_flight[operation] = max(self.max_in_flight[operation], self.in_flight[operation])
		try:
			delay = self.delays.get(operation)
			if delay:
				await asyncio.sleep(delay)
			failure = self.failures.get(operation)
			if failure is not None:
				raise failure
		finally:
			self.in_flight[operation] -= 1

	def _window(self, matching: list[models.Post], anchor: Optional[models.Post], limit: int):
		ordered = sorted(matching, key=lambda post: (post.created_at, post.id), reverse=True)
		total = len(ordered)
		if anchor is not None:
			ordered = [post for post in ordered if (post.created_at, post.id) < (anchor.created_at, anchor.id)]
		return ordered[:limit], total

	# ------------------------------------------------------------------
	# PostStore

	async def get_post(self, post_id: UUID) -> Optional[models.Post]:
		await self._enter("get_post", post_id)
		return self.posts.get(post_id)

	async def window_global(self, anchor, limit):
		await self._enter("window_global", limit)
		return self._window(list(self.posts.values()), anchor, limit)

	async def window_following(self, subject_username, anchor, limit):
		await self._enter("window_following", subject_username)
		followed = {following for follower, following in self.follows if follower == subject_username}
		return self._window([p for p in self.posts.values() if p.username in followed], anchor, limit)

	async def window_hashtag(self, tag, anchor, limit):
		await self._enter("window_hashtag", tag)
		return self._window([p for p in self.posts.values() if tag in p.hashtags], anchor, limit)

	async def window_user(self, username, offset, limit):
		await self._enter("window_user", username)
		ordered, total = self._window([p for p in self.posts.values() if p.username == username], None, len(self.posts))
		return ordered[offset : offset + limit], total

	# ------------------------------------------------------------------
	# EngagementStore

	async def count_likes(self, post_id: UUID) -> int:
		await self._enter("count_likes", post_id)
		return sum(1 for liked_id, _ in self.likes if liked_id == post_id)

	async def find_like(self, post_id: UUID, username: str) -> bool:
		await self._enter("find_like", (post_id, username))
		return (post_id, username) in self.likes

	async def count_comments(self, post_id: UUID) -> int:
		await self._enter("count_comments", post_id)
		return self.comments.get(post_id, 0)

	# ------------------------------------------------------------------
	# IdentityStore

	async def find_display_info(self, username: str) -> Optional[models.DisplayInfo]:
		await self._enter("find_display_info", username)
		return self.users.get(username)

	async def exists(self, username: str) -> bool:
		await self._enter("exists", username)
		return username in self.users
