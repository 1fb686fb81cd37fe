"""Per-request state shared by the decoration tasks of one feed page."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from socialfeed.feed.domain import models
from socialfeed.feed.domain.stores import IdentityStore
from socialfeed.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class DecorationContext:
    """Carries the viewer and memoises author lookups for a single page.

    Concurrent decorations of posts by the same author share one in-flight
    lookup. The context lives only as long as the request that created it.
    """

    def __init__(self, viewer: Optional[str], identity: IdentityStore) -> None:
        self.viewer = viewer or None
        self._identity = identity
        self._authors: dict[str, asyncio.Task[Optional[models.DisplayInfo]]] = {}

    async def author(self, username: str) -> Optional[models.DisplayInfo]:
        task = self._authors.get(username)
        if task is None:
            task = asyncio.ensure_future(self._lookup(username))
            self._authors[username] = task
        # one waiter being cancelled must not cancel the lookup for the others
        return await asyncio.shield(task)

    async def _lookup(self, username: str) -> Optional[models.DisplayInfo]:
        info = await self._identity.find_display_info(username)
        if info is None:
            obs_metrics.inc_degraded("author_missing")
            logger.info("feed.author_missing", extra={"author": username})
        return info

    @property
    def lookups(self) -> int:
        return len(self._authors)

    async def close(self) -> None:
        pending = [task for task in self._authors.values() if not task.done()]
        for task in pending:
            task.cancel()
        # collect outcomes so failed lookups are never reported as unretrieved
        await asyncio.gather(*self._authors.values(), return_exceptions=True)
