"""Audit trail endpoints."""

from __future__ import annotations

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from airport.api.deps import get_audit_repo, get_current_user
from airport.contracts.audit import AuditCleanupRequest, AuditReportRequest, AuditSearch
from airport.persistence.repositories.audit_repo import AuditRepository

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("/logs")
async def list_logs(
    query: Annotated[AuditSearch, Query()],
    user_id: int = Depends(get_current_user),
    repo: AuditRepository = Depends(get_audit_repo),
) -> dict:
    page = await asyncio.to_thread(repo.search, query)
    return page.to_response()


@router.get("/logs/record/{table_name}/{record_id}")
async def logs_for_record(
    table_name: str,
    record_id: int,
    user_id: int = Depends(get_current_user),
    repo: AuditRepository = Depends(get_audit_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_record, table_name, record_id)
    return [log.to_response() for log in items]


@router.get("/logs/table/{table_name}")
async def logs_for_table(
    table_name: str,
    limit: int = Query(100, ge=1, le=1000),
    user_id: int = Depends(get_current_user),
    repo: AuditRepository = Depends(get_audit_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_table, table_name, limit)
    return [log.to_response() for log in items]


@router.get("/logs/user/{actor_id}")
async def logs_for_user(
    actor_id: int,
    limit: int = Query(100, ge=1, le=1000),
    user_id: int = Depends(get_current_user),
    repo: AuditRepository = Depends(get_audit_repo),
) -> list[dict]:
    items = await asyncio.to_thread(repo.by_user, actor_id, limit)
    return [log.to_response() for log in items]


@router.get("/logs/{log_id}")
async def get_log(
    log_id: int,
    user_id: int = Depends(get_current_user),
    repo: AuditRepository = Depends(get_audit_repo),
) -> dict:
    item = await asyncio.to_thread(repo.get, log_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Audit log not found")
    return item.to_response()


@router.get("/statistics")
async def audit_statistics(
    user_id: int = Depends(get_current_user),
    repo: AuditRepository = Depends(get_audit_repo),
) -> dict:
    return await asyncio.to_thread(repo.statistics)


@router.get("/summary")
async def audit_summary(
    user_id: int = Depends(get_current_user),
    repo: AuditRepository = Depends(get_audit_repo),
) -> dict:
    return await asyncio.to_thread(repo.summary)


@router.post("/report")
async def audit_report(
    request: AuditReportRequest,
    user_id: int = Depends(get_current_user),
    repo: AuditRepository = Depends(get_audit_repo),
) -> dict:
    return await asyncio.to_thread(repo.report, request)


@router.post("/cleanup")
async def audit_cleanup(
    request: AuditCleanupRequest,
    user_id: int = Depends(get_current_user),
    repo: AuditRepository = Depends(get_audit_repo),
) -> dict:
    deleted = await asyncio.to_thread(repo.cleanup, request.retention_days)
    return {"deleted": deleted, "retention_days": request.retention_days}
