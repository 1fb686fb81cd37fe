"""Embedding of the original post inside a repost, one level deep."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from socialfeed.feed.domain import models
from socialfeed.feed.domain.stores import PostStore
from socialfeed.feed.schemas import dto
from socialfeed.feed.services import records
from socialfeed.feed.services.context import DecorationContext
from socialfeed.feed.services.engagement import EngagementDecorator
from socialfeed.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class RepostResolver:
    def __init__(self, posts: PostStore, engagement: EngagementDecorator) -> None:
        self._posts = posts
        self._engagement = engagement

    async def resolve_original(self, post: models.Post, ctx: DecorationContext) -> Optional[dto.FeedRecord]:
        """Return the decorated original of ``post`` or None.

        The embedded record never carries a repost of its own, even when the
        original is itself a repost.
        """
        if post.repost_id is None:
            return None
        original = await self._posts.get_post(post.repost_id)
        if original is None:
            obs_metrics.inc_degraded("repost_missing")
            logger.info(
                "feed.repost_missing",
                extra={"post_id": str(post.id), "repost_id": str(post.repost_id)},
            )
            return None
        engagement, author = await asyncio.gather(
            self._engagement.decorate(original, ctx.viewer),
            ctx.author(original.username),
        )
        return records.feed_record(original, engagement, author, repost=None)
