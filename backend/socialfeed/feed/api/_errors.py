"""Error translation helpers for the feed API."""

from __future__ import annotations

from fastapi import HTTPException

from socialfeed.feed.domain import exceptions


def to_http_error(exc: exceptions.FeedError) -> HTTPException:
	"""Translate domain exceptions to FastAPI HTTP errors."""
	return HTTPException(status_code=exc.status_code, detail=exc.detail)
