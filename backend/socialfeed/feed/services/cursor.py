"""Resolution of opaque "last seen post" cursors into anchor posts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from socialfeed.feed.domain import models
from socialfeed.feed.domain.stores import PostStore
from socialfeed.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedCursor:
    anchor: Optional[models.Post] = None
    stale: bool = False

    @property
    def found(self) -> bool:
        return self.anchor is not None


class CursorResolver:
    """Turns a client cursor into an anchor post.

    A cursor that is malformed or points at a deleted post resolves to "not
    found" rather than an error, so the caller serves the newest window.
    Only store faults propagate.
    """

    def __init__(self, posts: PostStore) -> None:
        self._posts = posts

    async def resolve(self, token: Optional[str]) -> ResolvedCursor:
        token = (token or "").strip()
        if not token:
            return ResolvedCursor()
        try:
            post_id = UUID(token)
        except ValueError:
            obs_metrics.inc_degraded("cursor_invalid")
            logger.info("feed.cursor_invalid", extra={"cursor": token})
            return ResolvedCursor(stale=True)
        anchor = await self._posts.get_post(post_id)
        if anchor is None:
            obs_metrics.inc_degraded("cursor_not_found")
            logger.info("feed.cursor_not_found", extra={"cursor": token})
            return ResolvedCursor(stale=True)
        return ResolvedCursor(anchor=anchor)
