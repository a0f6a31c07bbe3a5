"""Helpers for reading the backend-issued JWT carried in the auth cookie."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from jose import JWTError, jwt

from mentor_portal.core.config import get_settings

_USER_ID_CLAIMS = ("id", "_id", "userId", "sub")


def read_token_claims(token: str) -> dict[str, Any] | None:
    """Return JWT claims, or None when the token cannot be decoded.

    Signatures are verified only when ``JWT_SECRET`` is configured; otherwise
    the backend remains the authority and claims are read as hints. Expiry is
    not enforced here, see ``is_token_expired``.
    """
    settings = get_settings()
    try:
        if settings.jwt_secret:
            return jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.jwt_algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def is_token_expired(claims: dict[str, Any] | None, now: datetime | None = None) -> bool:
    """True when the claims carry an ``exp`` that has already passed."""
    if not claims:
        return False
    exp = claims.get("exp")
    if not isinstance(exp, int | float):
        return False
    current = now or datetime.now(timezone.utc)
    return current.timestamp() >= float(exp)


def user_id_from_claims(claims: dict[str, Any] | None) -> str | None:
    if not claims:
        return None
    for name in _USER_ID_CLAIMS:
        value = claims.get(name)
        if value:
            return str(value)
    return None
