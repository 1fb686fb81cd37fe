"""Centralised JWT helpers for access tokens.

Uses HS256 with the application's secret key. Tokens are minted by the
account service; this backend only verifies them.
"""

from __future__ import annotations

import time
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from socialfeed.settings import settings


ISSUER = "server-beta"


def encode_access(payload: dict[str, object], *, ttl_seconds: int = 3600) -> str:
    """Encode an access token; used by tests and local tooling."""
    now = int(time.time())
    body: Dict[str, Any] = {"iss": ISSUER, "iat": now, "exp": now + ttl_seconds}
    body.update(payload)
    return jwt.encode(body, settings.secret_key, algorithm="HS256")


def decode_access(token: str) -> dict[str, object]:
    """Decode and validate an access token.

    Raises jwt.InvalidTokenError subclasses on failure.
    """
    payload = jwt.decode(
        token,
        settings.secret_key,
        algorithms=["HS256"],
        issuer=ISSUER,
        leeway=5,
        options={"require": ["exp", "iat", "iss"]},
    )
    if not payload.get("username"):
        raise InvalidTokenError("missing_claim:username")
    return payload  # type: ignore[return-value]
