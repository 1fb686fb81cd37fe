"""Custom exceptions for the feed engine."""

from __future__ import annotations

from fastapi import status

if hasattr(status, "HTTP_422_UNPROCESSABLE_CONTENT"):
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_CONTENT
else:  # pragma: no cover - older Starlette builds
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_ENTITY


class FeedError(Exception):
	"""Base class for feed related errors."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "feed_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class NotFoundError(FeedError):
	"""Raised when the subject of a request does not exist."""

	status_code = status.HTTP_404_NOT_FOUND
	detail = "not_found"


class InvalidModeError(FeedError):
	"""Raised when a feed mode is requested without the identity it needs."""

	status_code = status.HTTP_401_UNAUTHORIZED
	detail = "unauthorized"


class ValidationError(FeedError):
	"""Raised for request parameters FastAPI validation does not cover."""

	status_code = _HTTP_422
	detail = "validation_error"


class UpstreamUnavailableError(FeedError):
	"""Raised when a backing store fails for infrastructure reasons."""

	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
	detail = "upstream_unavailable"


class FeedCancelledError(FeedError):
	"""Raised when the request deadline expires before the page is complete."""

	status_code = status.HTTP_504_GATEWAY_TIMEOUT
	detail = "feed_cancelled"
