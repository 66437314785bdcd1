"""Audit log query endpoint (admin only)."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import require_admin
from resource_pulse.schemas.audit import AuditLogResponse
from resource_pulse.services.audit_service import DEFAULT_LIMIT, MAX_LIMIT, audit_service

router = APIRouter(
    prefix="/api/audit-logs",
    tags=["Audit"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[AuditLogResponse], summary="Query the audit log")
async def list_audit_logs(
    entity_name: Optional[str] = Query(default=None),
    entity_id: Optional[str] = Query(default=None),
    action: Optional[str] = Query(default=None, description="POST, PUT, PATCH or DELETE"),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None, description="Inclusive"),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    db: AsyncSession = Depends(get_db_session),
) -> List[AuditLogResponse]:
    """
    What:  Audit rows, newest first, filtered by entity, action and date range.
    Who:   Admins reviewing who changed what.
    """
    return await audit_service.list_logs(
        db,
        entity_name=entity_name,
        entity_id=entity_id,
        action=action,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
