"""Feed assembly: cursor resolution, windowed fetch and per-post decoration.

Ordering is strictly ``(created_at DESC, id DESC)`` as returned by the post
store; decoration runs concurrently but records are reassembled in window
order. Pagination is snapshot-less: a post written while a client pages may
or may not show up on a later page depending on where its timestamp falls
relative to the anchor.
"""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from socialfeed.feed.domain import models, policies, repo
from socialfeed.feed.domain.exceptions import FeedCancelledError, FeedError, NotFoundError
from socialfeed.feed.domain.stores import EngagementStore, IdentityStore, PostStore, Window
from socialfeed.feed.infra.identity_cache import CachedIdentityStore
from socialfeed.feed.schemas import dto
from socialfeed.feed.services import records
from socialfeed.feed.services.context import DecorationContext
from socialfeed.feed.services.cursor import CursorResolver
from socialfeed.feed.services.engagement import EngagementDecorator
from socialfeed.feed.services.reposts import RepostResolver
from socialfeed.obs import metrics as obs_metrics
from socialfeed.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FeedAssembler:
    """Builds viewer-relative feed pages from the post, engagement and identity stores."""

    def __init__(
        self,
        posts: PostStore,
        engagement: EngagementStore,
        identity: IdentityStore,
        *,
        concurrency: int | None = None,
        deadline_seconds: float | None = None,
    ) -> None:
        self.posts = posts
        self.identity = identity
        self.cursors = CursorResolver(posts)
        self.engagement = EngagementDecorator(engagement)
        self.reposts = RepostResolver(posts, self.engagement)
        self._concurrency = concurrency or settings.feed_fanout_concurrency
        self._deadline_seconds = deadline_seconds if deadline_seconds is not None else settings.feed_deadline_seconds

    # ------------------------------------------------------------------
    # Cursor feeds

    async def assemble(
        self,
        mode: models.FeedMode,
        cursor_token: Optional[str],
        page_size: int,
        viewer: Optional[str],
        *,
        deadline: float | None = None,
    ) -> dto.FeedPage:
        policies.ensure_page_size(page_size)
        policies.require_viewer(mode, viewer)
        if isinstance(mode, models.HashtagMode):
            mode = models.HashtagMode(policies.normalise_hashtag(mode.tag))
        page = await self._run_with_deadline(
            mode.name,
            self._assemble(mode, cursor_token, page_size, viewer),
            deadline,
        )
        obs_metrics.observe_page(mode.name, len(page.records))
        return page

    async def _assemble(
        self,
        mode: models.FeedMode,
        cursor_token: Optional[str],
        page_size: int,
        viewer: Optional[str],
    ) -> dto.FeedPage:
        resolved = await self.cursors.resolve(cursor_token)
        # a stale cursor falls back to the newest window of the same base query
        posts, total = await self._window(mode, resolved.anchor, page_size)
        if resolved.stale:
            logger.info(
                "feed.cursor_fallback",
                extra={"mode": mode.name, "records": len(posts), "total": total},
            )
        if not posts:
            return records.cursor_page([], [], limit=page_size, total=total)
        ctx = DecorationContext(viewer, self.identity)
        try:
            decorated = await self._fan_out(posts, lambda post: self._decorate(post, ctx))
        finally:
            await ctx.close()
        return records.cursor_page(decorated, posts, limit=page_size, total=total)

    async def _window(self, mode: models.FeedMode, anchor: Optional[models.Post], limit: int) -> Window:
        if isinstance(mode, models.GlobalMode):
            return await self.posts.window_global(anchor, limit)
        if isinstance(mode, models.FollowingMode):
            return await self.posts.window_following(mode.subject_username, anchor, limit)
        if isinstance(mode, models.HashtagMode):
            return await self.posts.window_hashtag(mode.tag, anchor, limit)
        raise FeedError("unknown_feed_mode")

    async def _decorate(self, post: models.Post, ctx: DecorationContext) -> dto.FeedRecord:
        engagement, author, original = await asyncio.gather(
            self.engagement.decorate(post, ctx.viewer),
            ctx.author(post.username),
            self.reposts.resolve_original(post, ctx),
        )
        return records.feed_record(post, engagement, author, original)

    # ------------------------------------------------------------------
    # Per-user feed

    async def assemble_user_feed(
        self,
        username: str,
        offset: int,
        limit: int,
        viewer: Optional[str],
        *,
        deadline: float | None = None,
    ) -> dto.UserFeedPage:
        policies.ensure_page_size(limit)
        policies.ensure_offset(offset)
        page = await self._run_with_deadline(
            "user",
            self._assemble_user_feed(username, offset, limit, viewer),
            deadline,
        )
        obs_metrics.observe_page("user", len(page.records))
        return page

    async def _assemble_user_feed(
        self,
        username: str,
        offset: int,
        limit: int,
        viewer: Optional[str],
    ) -> dto.UserFeedPage:
        if not await self.identity.exists(username):
            raise NotFoundError("user_not_found")
        posts, total = await self.posts.window_user(username, offset, limit)
        if not posts:
            return records.offset_page([], offset=offset, limit=limit, total=total)
        ctx = DecorationContext(viewer, self.identity)

        async def _decorate_user_post(post: models.Post) -> dto.UserFeedRecord:
            engagement, original = await asyncio.gather(
                self.engagement.decorate(post, ctx.viewer),
                self.reposts.resolve_original(post, ctx),
            )
            return records.user_feed_record(post, engagement, original)

        try:
            decorated = await self._fan_out(posts, _decorate_user_post)
        finally:
            await ctx.close()
        return records.offset_page(decorated, offset=offset, limit=limit, total=total)

    # ------------------------------------------------------------------
    # Helpers

    async def _run_with_deadline(self, mode_name: str, work: Awaitable[T], deadline: float | None) -> T:
        timeout = deadline if deadline is not None else self._deadline_seconds
        start = perf_counter()
        outcome = "error"
        try:
            result = await asyncio.wait_for(work, timeout=timeout)
            outcome = "ok"
            return result
        except asyncio.TimeoutError as exc:
            outcome = "cancelled"
            logger.warning("feed.deadline_exceeded", extra={"mode": mode_name, "timeout_s": timeout})
            raise FeedCancelledError() from exc
        except asyncio.CancelledError:
            outcome = "cancelled"
            raise
        except FeedError as exc:
            outcome = exc.detail
            raise
        finally:
            obs_metrics.observe_feed(mode_name, outcome, perf_counter() - start)

    async def _fan_out(
        self,
        items: Sequence[models.Post],
        build: Callable[[models.Post], Awaitable[T]],
    ) -> list[T]:
        """Run ``build`` for every post with bounded concurrency, keeping input order.

        The first failure cancels every task still in flight and is re-raised.
        """
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(post: models.Post) -> T:
            async with semaphore:
                return await build(post)

        tasks = [asyncio.create_task(_bounded(post)) for post in items]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            for task in tasks:
                if task.done() and not task.cancelled() and task.exception() is not None:
                    raise task.exception()  # type: ignore[misc]
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        return [task.result() for task in tasks]


def build_assembler(pool=None) -> FeedAssembler:
    """Wire the Postgres stores, with the Redis display cache when enabled."""
    identity: IdentityStore = repo.PostgresIdentityStore(pool)
    if settings.identity_cache_enabled:
        identity = CachedIdentityStore(identity)
    return FeedAssembler(
        repo.PostgresPostStore(pool),
        repo.PostgresEngagementStore(pool),
        identity,
    )
