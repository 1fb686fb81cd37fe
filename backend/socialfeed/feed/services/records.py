"""Shaping helpers turning domain objects into feed response records."""

from __future__ import annotations

from typing import Optional, Sequence

from socialfeed.feed.domain import models
from socialfeed.feed.schemas import dto
from socialfeed.feed.services.engagement import Engagement
from socialfeed.settings import settings


def image_metadata(image: Optional[models.ImageRef]) -> Optional[dto.ImageMetadata]:
    if image is None:
        return None
    return dto.ImageMetadata(
        url=image.url(settings.image_base_url),
        width=image.width,
        height=image.height,
        tag=image.tag,
    )


def location_block(location: Optional[models.Location]) -> Optional[dto.LocationBlock]:
    if location is None or location.is_empty():
        return None
    return dto.LocationBlock(
        longitude=location.longitude,
        latitude=location.latitude,
        accuracy=location.accuracy,
    )


def author_block(info: Optional[models.DisplayInfo]) -> Optional[dto.AuthorBlock]:
    if info is None:
        return None
    return dto.AuthorBlock(
        username=info.username,
        nickname=info.nickname,
        picture=image_metadata(info.picture),
    )


def feed_record(
    post: models.Post,
    engagement: Engagement,
    author: Optional[models.DisplayInfo],
    repost: Optional[dto.FeedRecord],
) -> dto.FeedRecord:
    return dto.FeedRecord(
        post_id=post.id,
        author=author_block(author),
        creation_date=post.created_at,
        content=post.content,
        picture=image_metadata(post.image),
        location=location_block(post.location),
        likes=engagement.likes,
        liked=engagement.liked,
        comments=engagement.comments,
        repost=repost,
    )


def user_feed_record(
    post: models.Post,
    engagement: Engagement,
    repost: Optional[dto.FeedRecord],
) -> dto.UserFeedRecord:
    return dto.UserFeedRecord(
        post_id=post.id,
        creation_date=post.created_at,
        content=post.content,
        picture=image_metadata(post.image),
        location=location_block(post.location),
        likes=engagement.likes,
        liked=engagement.liked,
        comments=engagement.comments,
        repost=repost,
    )


def cursor_page(
    records: Sequence[dto.FeedRecord],
    posts: Sequence[models.Post],
    *,
    limit: int,
    total: int,
) -> dto.FeedPage:
    """Package a window; the next cursor is the id of the window's last post."""
    last_post_id = str(posts[-1].id) if posts else ""
    return dto.FeedPage(
        records=list(records),
        pagination=dto.CursorPagination(last_post_id=last_post_id, limit=limit, records=total),
    )


def offset_page(
    records: Sequence[dto.UserFeedRecord],
    *,
    offset: int,
    limit: int,
    total: int,
) -> dto.UserFeedPage:
    return dto.UserFeedPage(
        records=list(records),
        pagination=dto.OffsetPagination(offset=offset, limit=limit, records=total),
    )
