"""
ResourcePulse Backend - Resource Service
========================================

What:  CRUD for resources (people), with skills and current allocations
       embedded in every response.
How:   Skills are attached through SkillService.resolve_skills. Deleting a
       resource removes its allocations first.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import NotFoundError, ValidationError
from resource_pulse.models.allocation import Allocation
from resource_pulse.models.resource import Resource
from resource_pulse.models.role import Role
from resource_pulse.models.skill import Skill
from resource_pulse.schemas.allocation import AllocationResponse
from resource_pulse.schemas.resource import ResourceCreate, ResourceResponse, ResourceUpdate
from resource_pulse.services.allocation_service import allocation_service
from resource_pulse.services.base import translate_db_errors
from resource_pulse.services.skill_service import skill_service

logger = logging.getLogger(__name__)


def to_response(
    resource: Resource, allocations: Optional[List[AllocationResponse]] = None
) -> ResourceResponse:
    allocations = allocations or []
    return ResourceResponse(
        id=resource.id,
        name=resource.name,
        role_id=resource.role_id,
        role_name=resource.role.name if resource.role else None,
        email=resource.email,
        phone=resource.phone,
        hourly_rate=resource.hourly_rate,
        billable_rate=resource.billable_rate,
        skills=[s.name for s in resource.skills],
        allocations=allocations,
        total_utilization=sum(a.utilization for a in allocations),
        created_at=resource.created_at,
        updated_at=resource.updated_at,
    )


class ResourceService:

    async def list_resources(
        self,
        db: AsyncSession,
        skill: Optional[str] = None,
        role_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[ResourceResponse]:
        query = select(Resource).order_by(Resource.name)
        if skill:
            query = query.where(
                Resource.skills.any(func.lower(Skill.name) == skill.strip().lower())
            )
        if role_id is not None:
            query = query.where(Resource.role_id == role_id)
        if search:
            query = query.where(Resource.name.ilike(f"%{search.strip()}%"))

        with translate_db_errors("list resources"):
            result = await db.execute(query)
            resources = list(result.scalars().all())

        current = await allocation_service.current_allocations(db, [r.id for r in resources])
        return [to_response(r, current[r.id]) for r in resources]

    async def get_resource(self, db: AsyncSession, resource_id: int) -> ResourceResponse:
        resource = await self._get(db, resource_id)
        current = await allocation_service.current_allocations(db, [resource.id])
        return to_response(resource, current[resource.id])

    async def create_resource(
        self, db: AsyncSession, payload: ResourceCreate
    ) -> ResourceResponse:
        name = self._clean_name(payload.name)
        await self._validate_role(db, payload.role_id)

        skills = await skill_service.resolve_skills(db, payload.skills)
        resource = Resource(
            name=name,
            email=payload.email,
            phone=payload.phone,
            hourly_rate=payload.hourly_rate,
            billable_rate=payload.billable_rate,
            skills=skills,
        )
        # Assigning the relationship (not only the id) keeps role_name
        # readable without another query.
        resource.role = await self._role_or_none(db, payload.role_id)

        with translate_db_errors("create resource"):
            db.add(resource)
            await db.flush()
        logger.info("Created resource %s (%s)", resource.id, resource.name)
        return to_response(resource)

    async def update_resource(
        self, db: AsyncSession, resource_id: int, payload: ResourceUpdate
    ) -> ResourceResponse:
        resource = await self._get(db, resource_id)
        name = self._clean_name(payload.name)
        await self._validate_role(db, payload.role_id)

        resource.name = name
        resource.role = await self._role_or_none(db, payload.role_id)
        resource.email = payload.email
        resource.phone = payload.phone
        resource.hourly_rate = payload.hourly_rate
        resource.billable_rate = payload.billable_rate
        if payload.skills is not None:
            resource.skills = await skill_service.resolve_skills(db, payload.skills)

        with translate_db_errors("update resource"):
            await db.flush()
        return await self.get_resource(db, resource_id)

    async def delete_resource(self, db: AsyncSession, resource_id: int) -> None:
        resource = await self._get(db, resource_id)
        with translate_db_errors("delete resource"):
            await db.execute(delete(Allocation).where(Allocation.resource_id == resource_id))
            await db.delete(resource)
            await db.flush()
        logger.info("Deleted resource %s and its allocations", resource_id)

    async def _get(self, db: AsyncSession, resource_id: int) -> Resource:
        with translate_db_errors("fetch resource"):
            resource = await db.get(Resource, resource_id)
        if resource is None:
            raise NotFoundError(resource="resource", resource_id=resource_id)
        return resource

    async def _validate_role(self, db: AsyncSession, role_id: Optional[int]) -> None:
        if role_id is not None and await self._role_or_none(db, role_id) is None:
            raise ValidationError(f"Role with ID '{role_id}' does not exist", field="role_id")

    async def _role_or_none(self, db: AsyncSession, role_id: Optional[int]) -> Optional[Role]:
        if role_id is None:
            return None
        with translate_db_errors("fetch role"):
            return await db.get(Role, role_id)

    @staticmethod
    def _clean_name(name: str) -> str:
        name = name.strip()
        if not name:
            raise ValidationError("Resource name is required", field="name")
        return name


resource_service = ResourceService()
