"""Viewer resolution for FastAPI endpoints.

Session handling lives in the account service. Here we only verify the bearer
JWT it issues and expose the username as the feed viewer. In development the
`X-Username` header is accepted for local tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from socialfeed.infra import jwt as jwt_helper
from socialfeed.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	username: str


_bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	return AuthenticatedUser(username=str(payload["username"]).strip())


async def get_optional_user(
	x_username: Optional[str] = Header(default=None, alias="X-Username"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser | None:
	"""Resolve the viewer if one is presented; anonymous callers get None.

	A bearer token that is present but invalid is still rejected.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		return verify_access_jwt(credentials.credentials)
	if settings.is_dev() and x_username and x_username.strip():
		return AuthenticatedUser(username=x_username.strip())
	return None


async def get_current_user(user: AuthenticatedUser | None = Depends(get_optional_user)) -> AuthenticatedUser:
	if user is None:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
	return user
