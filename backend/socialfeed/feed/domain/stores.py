"""Read contracts the feed engine consumes from its backing stores.

Point lookups report absence with ``None``/``False``. Infrastructure faults
raise :class:`~socialfeed.feed.domain.exceptions.UpstreamUnavailableError`.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence
from uuid import UUID

from socialfeed.feed.domain import models

Window = tuple[Sequence[models.Post], int]


class PostStore(Protocol):
	async def get_post(self, post_id: UUID) -> Optional[models.Post]: ...

	async def window_global(self, anchor: Optional[models.Post], limit: int) -> Window: ...

	async def window_following(
		self, subject_username: str, anchor: Optional[models.Post], limit: int
	) -> Window: ...

	async def window_hashtag(self, tag: str, anchor: Optional[models.Post], limit: int) -> Window: ...

	async def window_user(self, username: str, offset: int, limit: int) -> Window: ...


class EngagementStore(Protocol):
	async def count_likes(self, post_id: UUID) -> int: ...

	async def find_like(self, post_id: UUID, username: str) -> bool: ...

	async def count_comments(self, post_id: UUID) -> int: ...


class IdentityStore(Protocol):
	async def find_display_info(self, username: str) -> Optional[models.DisplayInfo]: ...

	async def exists(self, username: str) -> bool: ...
