"""
ResourcePulse Backend - Allocation Service
==========================================

What:  Allocation listing, the create-or-update upsert, deletion and the
       "ending soon" report.
Who:   routes/allocations.py; ResourceService and ProjectService reuse
       `current_allocations` to embed allocations in their responses.

Upsert rules (PUT /api/allocations/resource/{resource_id}):
    1. utilization in 1..150 and start_date <= end_date          -> else 400
    2. resource and project exist                                  -> else 404
    3. overlapping utilization on *other* projects + new value
       <= maxUtilizationPercentage, unless allowOverallocation    -> else 400
    4. financial figures derived from work days (Mon-Fri)
    5. an allocation to the same project ending today or later is
       updated in place; otherwise a new row is inserted
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import NotFoundError, ValidationError
from resource_pulse.models.allocation import Allocation
from resource_pulse.models.project import Project
from resource_pulse.models.resource import Resource
from resource_pulse.schemas.allocation import AllocationResponse, AllocationUpsert
from resource_pulse.services.base import translate_db_errors
from resource_pulse.services.settings_service import settings_service

logger = logging.getLogger(__name__)

MIN_UTILIZATION = 1
MAX_UTILIZATION = 150
HOURS_PER_DAY = 8


def count_workdays(start: date, end: date) -> int:
    """
    Weekdays (Monday to Friday) in [start, end], both ends inclusive.

        >>> count_workdays(date(2024, 1, 1), date(2024, 1, 7))  # Mon..Sun
        5
    """
    if end < start:
        return 0
    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    workdays = full_weeks * 5
    for offset in range(remainder):
        if (start + timedelta(days=full_weeks * 7 + offset)).weekday() < 5:
            workdays += 1
    return workdays


def _money(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 2)


def to_response(
    allocation: Allocation,
    resource_name: Optional[str] = None,
    project_name: Optional[str] = None,
    client: Optional[str] = None,
) -> AllocationResponse:
    return AllocationResponse(
        id=allocation.id,
        resource_id=allocation.resource_id,
        resource_name=resource_name,
        project_id=allocation.project_id,
        project_name=project_name,
        client=client,
        start_date=allocation.start_date,
        end_date=allocation.end_date,
        utilization=allocation.utilization,
        hourly_rate=allocation.hourly_rate,
        billable_rate=allocation.billable_rate,
        total_hours=allocation.total_hours,
        total_cost=allocation.total_cost,
        billable_amount=allocation.billable_amount,
        is_billable=allocation.is_billable,
        billing_type=allocation.billing_type,
        created_at=allocation.created_at,
        updated_at=allocation.updated_at,
    )


def _joined_query():
    return (
        select(Allocation, Resource.name, Project.name, Project.client)
        .join(Resource, Allocation.resource_id == Resource.id)
        .join(Project, Allocation.project_id == Project.id)
    )


class AllocationService:

    async def list_allocations(
        self,
        db: AsyncSession,
        resource_id: Optional[int] = None,
        project_id: Optional[int] = None,
        active_only: bool = False,
    ) -> List[AllocationResponse]:
        query = _joined_query()
        if resource_id is not None:
            query = query.where(Allocation.resource_id == resource_id)
        if project_id is not None:
            query = query.where(Allocation.project_id == project_id)
        if active_only:
            query = query.where(Allocation.end_date >= date.today())
        query = query.order_by(Allocation.end_date, Allocation.id)

        with translate_db_errors("list allocations"):
            result = await db.execute(query)
            return [to_response(*row) for row in result.all()]

    async def current_allocations(
        self, db: AsyncSession, resource_ids: Iterable[int]
    ) -> Dict[int, List[AllocationResponse]]:
        """Allocations ending today or later, grouped by resource id."""
        ids = list(resource_ids)
        grouped: Dict[int, List[AllocationResponse]] = {rid: [] for rid in ids}
        if not ids:
            return grouped

        query = (
            _joined_query()
            .where(Allocation.resource_id.in_(ids), Allocation.end_date >= date.today())
            .order_by(Allocation.end_date, Allocation.id)
        )
        with translate_db_errors("load current allocations"):
            result = await db.execute(query)
            for row in result.all():
                grouped[row[0].resource_id].append(to_response(*row))
        return grouped

    async def upsert_for_resource(
        self, db: AsyncSession, resource_id: int, payload: AllocationUpsert
    ) -> List[AllocationResponse]:
        """
        Creates or updates the resource's allocation to `payload.project_id`.

        Returns:
            The resource's current allocations after the write.
        Raises:
            ValidationError: utilization out of range, inverted dates, capacity exceeded
            NotFoundError: unknown resource or project
        """
        utilization = payload.utilization
        if not MIN_UTILIZATION <= utilization <= MAX_UTILIZATION:
            raise ValidationError(
                f"Utilization must be between {MIN_UTILIZATION} and {MAX_UTILIZATION}",
                field="utilization",
            )
        if payload.start_date > payload.end_date:
            raise ValidationError(
                "Start date must be before or equal to end date", field="end_date"
            )

        with translate_db_errors("save allocation"):
            resource = await db.get(Resource, resource_id)
            if resource is None:
                raise NotFoundError(resource="resource", resource_id=resource_id)
            project = await db.get(Project, payload.project_id)
            if project is None:
                raise NotFoundError(resource="project", resource_id=payload.project_id)

            await self._check_capacity(db, resource_id, payload)

            hourly_rate = payload.hourly_rate or resource.hourly_rate
            billable_rate = payload.billable_rate or resource.billable_rate
            workdays = count_workdays(payload.start_date, payload.end_date)
            total_hours = payload.total_hours or workdays * HOURS_PER_DAY * utilization / 100
            total_cost = hourly_rate * total_hours if hourly_rate else None
            billable_amount = (
                billable_rate * total_hours if payload.is_billable and billable_rate else None
            )

            existing = await db.scalar(
                select(Allocation)
                .where(
                    Allocation.resource_id == resource_id,
                    Allocation.project_id == payload.project_id,
                    Allocation.end_date >= date.today(),
                )
                .order_by(Allocation.end_date.desc())
                .limit(1)
            )
            allocation = existing or Allocation(
                resource_id=resource_id, project_id=payload.project_id
            )
            allocation.start_date = payload.start_date
            allocation.end_date = payload.end_date
            allocation.utilization = utilization
            allocation.hourly_rate = _money(hourly_rate)
            allocation.billable_rate = _money(billable_rate)
            allocation.total_hours = round(total_hours, 2)
            allocation.total_cost = _money(total_cost)
            allocation.billable_amount = _money(billable_amount)
            allocation.is_billable = payload.is_billable
            allocation.billing_type = payload.billing_type or "Hourly"
            if existing is None:
                db.add(allocation)
            await db.flush()

        logger.info(
            "%s allocation %s: resource=%s project=%s utilization=%s%%",
            "Updated" if existing is not None else "Created",
            allocation.id,
            resource_id,
            payload.project_id,
            utilization,
        )
        current = await self.current_allocations(db, [resource_id])
        return current[resource_id]

    async def delete_allocation(self, db: AsyncSession, allocation_id: int) -> None:
        with translate_db_errors("delete allocation"):
            allocation = await db.get(Allocation, allocation_id)
            if allocation is None:
                raise NotFoundError(resource="allocation", resource_id=allocation_id)
            await db.delete(allocation)
            await db.flush()
        logger.info("Deleted allocation %s", allocation_id)

    async def ending_soon(
        self, db: AsyncSession, days: Optional[int] = None
    ) -> List[AllocationResponse]:
        """Allocations whose end date falls within the next `days` days."""
        if days is None:
            days = int(await settings_service.get_number(db, "defaultEndingSoonDays", 14))
        start = date.today()
        query = (
            _joined_query()
            .where(Allocation.end_date >= start, Allocation.end_date <= start + timedelta(days=days))
            .order_by(Allocation.end_date, Allocation.id)
        )
        with translate_db_errors("list allocations ending soon"):
            result = await db.execute(query)
            return [to_response(*row) for row in result.all()]

    async def _check_capacity(
        self, db: AsyncSession, resource_id: int, payload: AllocationUpsert
    ) -> None:
        if await settings_service.get_bool(db, "allowOverallocation", False):
            return

        max_utilization = await settings_service.get_number(db, "maxUtilizationPercentage", 100)
        existing = await db.scalar(
            select(func.coalesce(func.sum(Allocation.utilization), 0)).where(
                Allocation.resource_id == resource_id,
                Allocation.project_id != payload.project_id,
                Allocation.start_date <= payload.end_date,
                Allocation.end_date >= payload.start_date,
            )
        )
        existing = int(existing or 0)
        if existing + payload.utilization > max_utilization:
            raise ValidationError(
                f"This allocation would exceed {max_utilization:g}% utilization. "
                f"Current utilization in this period: {existing}%",
                field="utilization",
                context={"current_utilization": existing, "max_utilization": max_utilization},
            )


allocation_service = AllocationService()
