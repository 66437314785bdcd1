"""
ResourcePulse Backend - Audit Service
=====================================

What:  Writes and queries audit log rows.
Who:   AuditMiddleware calls `record` with its own session; routes/audit_logs.py
       calls `list_logs`.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.models.audit_log import AuditLog
from resource_pulse.schemas.audit import AuditLogResponse
from resource_pulse.services.base import translate_db_errors

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class AuditService:

    async def record(
        self,
        db: AsyncSession,
        *,
        entity_name: str,
        entity_id: str,
        action: str,
        changed_by: str,
        new_values: Any = None,
        old_values: Any = None,
        request_path: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        entry = AuditLog(
            entity_name=entity_name,
            entity_id=entity_id,
            action=action,
            changed_by=changed_by,
            old_values=old_values,
            new_values=new_values,
            request_path=request_path,
            ip_address=ip_address,
        )
        with translate_db_errors("write audit log"):
            db.add(entry)
            await db.flush()
        return entry

    async def list_logs(
        self,
        db: AsyncSession,
        entity_name: Optional[str] = None,
        entity_id: Optional[str] = None,
        action: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> List[AuditLogResponse]:
        """
        Newest first. `end_date` is inclusive: the whole day is covered.
        """
        query = select(AuditLog)
        if entity_name:
            query = query.where(AuditLog.entity_name == entity_name)
        if entity_id:
            query = query.where(AuditLog.entity_id == entity_id)
        if action:
            query = query.where(AuditLog.action == action.upper())
        if start_date:
            query = query.where(AuditLog.change_date >= _day_start(start_date))
        if end_date:
            query = query.where(AuditLog.change_date < _day_start(end_date + timedelta(days=1)))
        query = query.order_by(AuditLog.change_date.desc(), AuditLog.id.desc())
        query = query.limit(min(max(limit, 1), MAX_LIMIT))

        with translate_db_errors("list audit logs"):
            result = await db.execute(query)
            return [AuditLogResponse.model_validate(row) for row in result.scalars().all()]


audit_service = AuditService()
