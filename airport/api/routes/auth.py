"""Login, registration and current-user endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends

from airport.api.deps import get_current_user, get_user_repo
from airport.contracts.user import AuthResponse, LoginRequest, User, UserRegistration
from airport.persistence.repositories.user_repo import UserRepository
from airport.services.errors import AuthenticationError
from airport.services.security import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])

DEFAULT_ROLE = "passenger"


def _auth_response(user: User) -> dict:
    roles = user.roles or []
    token = create_access_token(user.user_id, user.email, [r.role_name for r in roles])
    return AuthResponse(user=user, roles=roles, access_token=token).to_response()


@router.post("/login")
async def login(
    credentials: LoginRequest,
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    user = await asyncio.to_thread(repo.authenticate, credentials.email, credentials.password)
    if user is None:
        raise AuthenticationError("Invalid credentials")
    return _auth_response(user)


@router.post("/register", status_code=201)
async def register(
    account: UserRegistration,
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    user = await asyncio.to_thread(repo.register, account.changes(), DEFAULT_ROLE)
    return _auth_response(user)


@router.get("/me")
async def me(
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    user = await asyncio.to_thread(repo.get_with_roles, user_id)
    return user.to_response()
