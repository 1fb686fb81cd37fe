"""Domain models for posts, identities and feed selection modes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
	"""Optional geo position attached to a post."""

	longitude: Optional[float] = None
	latitude: Optional[float] = None
	accuracy: Optional[int] = None

	model_config = ConfigDict(from_attributes=True)

	def is_empty(self) -> bool:
		return self.longitude is None and self.latitude is None and self.accuracy is None


class ImageRef(BaseModel):
	"""Metadata of a stored image; the bytes live in the image service."""

	id: UUID
	format: str
	width: int
	height: int
	tag: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)

	def url(self, base_url: str) -> str:
		return f"{base_url.rstrip('/')}/api/images/{self.id}.{self.format.lstrip('.')}"


class Post(BaseModel):
	"""Represents a stored post."""

	id: UUID
	username: str
	content: str = ""
	created_at: datetime
	location: Optional[Location] = None
	image: Optional[ImageRef] = None
	repost_id: Optional[UUID] = None
	hashtags: list[str] = Field(default_factory=list)

	model_config = ConfigDict(from_attributes=True)


class DisplayInfo(BaseModel):
	"""Author attributes rendered next to a post."""

	username: str
	nickname: Optional[str] = None
	picture: Optional[ImageRef] = None

	model_config = ConfigDict(from_attributes=True)


@dataclass(frozen=True, slots=True)
class GlobalMode:
	name = "global"


@dataclass(frozen=True, slots=True)
class FollowingMode:
	subject_username: str
	name = "following"


@dataclass(frozen=True, slots=True)
class HashtagMode:
	tag: str
	name = "hashtag"


FeedMode = Union[GlobalMode, FollowingMode, HashtagMode]
