"""FastAPI routers for the feed engine."""

from __future__ import annotations

from fastapi import APIRouter

from socialfeed.feed.api import feeds

router = APIRouter(prefix="/api/v1")

router.include_router(feeds.router)
