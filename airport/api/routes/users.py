"""User account and role endpoints."""

from __future__ import annotations

import asyncio
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_current_user, get_user_repo
from airport.contracts.user import RoleAssignment, UserCreate, UserSearch, UserUpdate
from airport.persistence.repositories.user_repo import UserRepository

router = APIRouter(prefix="/users", tags=["users"])
roles_router = APIRouter(prefix="/roles", tags=["users"])


@router.post("", status_code=201)
async def create_user(
    user: UserCreate,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    item = await asyncio.to_thread(repo.create, user.changes(), user_id)
    return item.to_response()


@router.get("")
async def list_users(
    query: Annotated[UserSearch, Query()],
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/search")
async def search_users(
    query: Annotated[UserSearch, Query()],
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/status/{status}")
async def users_by_status(
    status: Literal["active", "inactive"],
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_status, status == "active")
    return [u.to_response() for u in items]


@router.get("/with-roles")
async def users_with_roles(
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.with_roles)
    return [u.to_response() for u in items]


@router.get("/username/{username}")
async def get_user_by_username(
    username: str,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    item = await asyncio.to_thread(repo.by_username, username)
    if item is None:
        raise HTTPException(status_code=404, detail="User not found")
    return item.to_response()


@router.get("/email/{email}")
async def get_user_by_email(
    email: str,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    item = await asyncio.to_thread(repo.by_email, email)
    if item is None:
        raise HTTPException(status_code=404, detail="User not found")
    return item.to_response()


@router.get("/{target_id}")
async def get_user(
    target_id: int,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, target_id)
    if item is None:
        raise HTTPException(status_code=404, detail="User not found")
    return item.to_response()


@router.put("/{target_id}")
async def update_user(
    target_id: int,
    user: UserUpdate,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    item = await asyncio.to_thread(repo.update, target_id, user.changes(), user_id)
    return item.to_response()


@router.put("/{target_id}/activate")
async def activate_user(
    target_id: int,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    item = await asyncio.to_thread(repo.set_active, target_id, True, user_id)
    return item.to_response()


@router.put("/{target_id}/deactivate")
async def deactivate_user(
    target_id: int,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    item = await asyncio.to_thread(repo.set_active, target_id, False, user_id)
    return item.to_response()


@router.delete("/{target_id}", status_code=204)
async def delete_user(
    target_id: int,
    hard: bool = False,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> None:
    await asyncio.to_thread(repo.remove, target_id, hard, user_id)


# ------------------------------------------------------------------
# Roles
# ------------------------------------------------------------------


@router.get("/{target_id}/roles")
async def get_user_roles(
    target_id: int,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.roles_of, target_id)
    return [r.to_response() for r in items]


@router.post("/{target_id}/roles")
async def assign_role(
    target_id: int,
    assignment: RoleAssignment,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> dict:
    assigned = await asyncio.to_thread(repo.assign_role, target_id, assignment.role_id, user_id)
    return {"assigned": assigned}


@router.delete("/{target_id}/roles/{role_id}", status_code=204)
async def remove_role(
    target_id: int,
    role_id: int,
    user_id: int = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repo),
) -> None:
    await asyncio.to_thread(repo.remove_role, target_id, role_id, user_id)


@roles_router.get("")
async def list_roles(repo: UserRepository = Depends(get_user_repo)) -> list[dict]:
    items = await asyncio.to_thread(repo.list_roles)
    return [r.to_response() for r in items]
