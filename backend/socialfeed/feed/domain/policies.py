"""Request policies applied before the feed engine touches any store."""

from __future__ import annotations

import re

from socialfeed.feed.domain import models
from socialfeed.feed.domain.exceptions import InvalidModeError, ValidationError
from socialfeed.settings import settings

_HASHTAG_RE = re.compile(r"^\w+$")


def ensure_page_size(limit: int) -> int:
	if limit < 1 or limit > settings.feed_max_page_size:
		raise ValidationError("invalid_limit")
	return limit


def ensure_offset(offset: int) -> int:
	if offset < 0:
		raise ValidationError("invalid_offset")
	return offset


def require_viewer(mode: models.FeedMode, viewer: str | None) -> None:
	"""The following timeline only exists for an authenticated viewer."""
	if isinstance(mode, models.FollowingMode) and not viewer:
		raise InvalidModeError("unauthorized")


def normalise_hashtag(raw: str | None) -> str:
	"""Accept ``tag`` or ``#tag``; hashtags are word characters only."""
	tag = (raw or "").strip()
	if tag.startswith("#"):
		tag = tag[1:]
	if not tag or not _HASHTAG_RE.match(tag):
		raise ValidationError("invalid_hashtag")
	return tag
