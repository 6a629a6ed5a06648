"""Password hashing (bcrypt) and access tokens (HS256 JWT via python-jose)."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from airport.services.errors import AuthenticationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
_DEV_SECRET = "airport-dev-secret-change-me"
_warned_dev_secret = False


def _secret() -> str:
    global _warned_dev_secret
    secret = os.environ.get("AIRPORT_JWT_SECRET")
    if secret:
        return secret
    if not _warned_dev_secret:
        logger.warning("AIRPORT_JWT_SECRET not set, using the development secret")
        _warned_dev_secret = True
    return _DEV_SECRET


def _ttl_minutes() -> int:
    return int(os.environ.get("AIRPORT_TOKEN_TTL_MINUTES", "60"))


# ------------------------------------------------------------------
# Passwords
# ------------------------------------------------------------------


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# ------------------------------------------------------------------
# Tokens
# ------------------------------------------------------------------


def create_access_token(
    user_id: int,
    email: str,
    roles: list[str],
    expires_minutes: int | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or _ttl_minutes())
    claims = {"sub": str(user_id), "email": email, "roles": roles, "exp": expire}
    return jwt.encode(claims, _secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verified claims, or ``AuthenticationError`` for a bad/expired token."""
    try:
        payload = jwt.decode(token, _secret(), algorithms=[ALGORITHM])
    except JWTError as exc:
        raise AuthenticationError(f"Invalid token: {exc}") from exc
    if "sub" not in payload:
        raise AuthenticationError("Invalid token: missing subject")
    return payload
