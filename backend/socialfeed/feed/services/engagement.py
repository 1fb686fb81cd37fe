"""Viewer-relative engagement metrics for a single post."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from socialfeed.feed.domain import models
from socialfeed.feed.domain.stores import EngagementStore


@dataclass(frozen=True, slots=True)
class Engagement:
    likes: int
    liked: bool
    comments: int


async def _not_liked() -> bool:
    return False


class EngagementDecorator:
    """Reads like/comment counts and the viewer's like for a post.

    The three reads are independent snapshots, not one transaction, so counts
    may be skewed against each other under concurrent writes.
    """

    def __init__(self, store: EngagementStore) -> None:
        self._store = store

    async def decorate(self, post: models.Post, viewer: Optional[str]) -> Engagement:
        liked_call = self._store.find_like(post.id, viewer) if viewer else _not_liked()
        likes, liked, comments = await asyncio.gather(
            self._store.count_likes(post.id),
            liked_call,
            self._store.count_comments(post.id),
        )
        return Engagement(likes=int(likes), liked=bool(liked), comments=int(comments))
