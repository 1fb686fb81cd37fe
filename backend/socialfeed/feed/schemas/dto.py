"""Pydantic schemas for feed responses.

Field aliases keep the camelCase JSON contract mobile clients already parse.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class _Schema(BaseModel):
	model_config = ConfigDict(populate_by_name=True)


class ImageMetadata(_Schema):
	url: str
	width: int
	height: int
	tag: Optional[datetime] = None


class LocationBlock(_Schema):
	longitude: Optional[float] = None
	latitude: Optional[float] = None
	accuracy: Optional[int] = None


class AuthorBlock(_Schema):
	username: str
	nickname: Optional[str] = None
	picture: Optional[ImageMetadata] = None


class FeedRecord(_Schema):
	post_id: UUID = Field(alias="postId")
	author: Optional[AuthorBlock] = None
	creation_date: datetime = Field(alias="creationDate")
	content: str
	picture: Optional[ImageMetadata] = None
	location: Optional[LocationBlock] = None
	likes: int
	liked: bool
	comments: int
	repost: Optional[FeedRecord] = None


class CursorPagination(_Schema):
	last_post_id: str = Field(default="", alias="lastPostId")
	limit: int
	records: int


class FeedPage(_Schema):
	records: List[FeedRecord] = Field(default_factory=list)
	pagination: CursorPagination


class UserFeedRecord(_Schema):
	post_id: UUID = Field(alias="postId")
	creation_date: datetime = Field(alias="creationDate")
	content: str
	picture: Optional[ImageMetadata] = None
	location: Optional[LocationBlock] = None
	likes: int
	liked: bool
	comments: int
	repost: Optional[FeedRecord] = None


class OffsetPagination(_Schema):
	offset: int
	limit: int
	records: int


class UserFeedPage(_Schema):
	records: List[UserFeedRecord] = Field(default_factory=list)
	pagination: OffsetPagination


FeedRecord.model_rebuild()
