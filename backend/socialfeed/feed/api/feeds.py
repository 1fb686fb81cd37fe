"""Feed endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from socialfeed.feed.api._errors import to_http_error
from socialfeed.feed.domain import exceptions, models
from socialfeed.feed.schemas import dto
from socialfeed.feed.services.assembler import build_assembler
from socialfeed.infra.auth import AuthenticatedUser, get_current_user, get_optional_user
from socialfeed.settings import settings

router = APIRouter(tags=["feeds"])
_assembler = build_assembler()


def _feed_mode(feed_type: str, viewer: AuthenticatedUser | None) -> models.FeedMode:
    # unknown feed types fall back to the global timeline
    if feed_type == "personal":
        return models.FollowingMode(subject_username=viewer.username if viewer else "")
    return models.GlobalMode()


@router.get("/feed", response_model=dto.FeedPage)
async def get_feed_endpoint(
    feed_type: str = Query(default="global", alias="feedType"),
    post_id: str = Query(default="", alias="postId"),
    limit: int = Query(default=settings.feed_default_page_size),
    viewer: AuthenticatedUser | None = Depends(get_optional_user),
) -> dto.FeedPage:
    username = viewer.username if viewer else None
    try:
        return await _assembler.assemble(_feed_mode(feed_type, viewer), post_id, limit, username)
    except exceptions.FeedError as exc:
        raise to_http_error(exc) from exc


@router.get("/posts", response_model=dto.FeedPage)
async def search_posts_by_hashtag_endpoint(
    q: str = Query(default=""),
    post_id: str = Query(default="", alias="postId"),
    limit: int = Query(default=settings.feed_default_page_size),
    viewer: AuthenticatedUser = Depends(get_current_user),
) -> dto.FeedPage:
    try:
        return await _assembler.assemble(models.HashtagMode(tag=q), post_id, limit, viewer.username)
    except exceptions.FeedError as exc:
        raise to_http_error(exc) from exc


@router.get("/users/{username}/feed", response_model=dto.UserFeedPage)
async def get_user_feed_endpoint(
    username: str,
    offset: int = Query(default=0),
    limit: int = Query(default=settings.feed_default_page_size),
    viewer: AuthenticatedUser = Depends(get_current_user),
) -> dto.UserFeedPage:
    try:
        return await _assembler.assemble_user_feed(username, offset, limit, viewer.username)
    except exceptions.FeedError as exc:
        raise to_http_error(exc) from exc


__all__ = ["router"]
