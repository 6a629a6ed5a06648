"""Bearer access-token verification."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from fastapi import Header, HTTPException

from airport.services.errors import AuthenticationError
from airport.services.security import decode_access_token


@dataclass
class UserClaims:
    user_id: int
    email: str | None = None
    roles: list[str] = field(default_factory=list)


async def verify_access_token(
    authorization: str | None = Header(None, description="Bearer <access token>"),
) -> UserClaims:
    """Extract and verify the access token from the Authorization header.

    In development, set ``AIRPORT_AUTH_DISABLED=1`` to bypass verification
    and act as a fixed admin user.
    """
    if os.environ.get("AIRPORT_AUTH_DISABLED") == "1":
        return UserClaims(user_id=0, email="dev@localhost", roles=["admin"])

    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    try:
        decoded = decode_access_token(token)
        user_id = int(decoded["sub"])
    except (AuthenticationError, ValueError) as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return UserClaims(
        user_id=user_id,
        email=decoded.get("email"),
        roles=list(decoded.get("roles") or []),
    )
