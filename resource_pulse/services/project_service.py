"""
ResourcePulse Backend - Project Service
=======================================

What:  Project CRUD with required skills, required roles and the resources
       currently allocated.
How:   Everything a create/update touches (project row, get-or-create skills,
       role requirements) happens in the request's single transaction.

Delete policy:
    A project that still has allocations cannot be deleted (409). Otherwise
    its milestones, RAID items, resource requests and skill/role links go
    with it.
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import ConflictError, NotFoundError, ValidationError
from resource_pulse.models.allocation import Allocation
from resource_pulse.models.milestone import Milestone
from resource_pulse.models.project import Project, ProjectRole
from resource_pulse.models.raid import RaidItem
from resource_pulse.models.resource import Resource
from resource_pulse.models.resource_request import ResourceRequest
from resource_pulse.models.role import Role
from resource_pulse.schemas.allocation import AllocationResponse
from resource_pulse.schemas.project import (
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    RequiredRoleIn,
    RequiredRoleOut,
)
from resource_pulse.services import allocation_service as allocations
from resource_pulse.services.base import translate_db_errors
from resource_pulse.services.skill_service import skill_service

logger = logging.getLogger(__name__)


def to_response(
    project: Project, allocated: Optional[List[AllocationResponse]] = None
) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name,
        client=project.client,
        description=project.description,
        start_date=project.start_date,
        end_date=project.end_date,
        status=project.status,
        budget=project.budget,
        required_skills=[s.name for s in project.skills],
        required_roles=[
            RequiredRoleOut(role_id=pr.role_id, name=pr.role.name, count=pr.count)
            for pr in sorted(project.required_roles, key=lambda pr: pr.role.name)
        ],
        allocated_resources=allocated or [],
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


class ProjectService:

    async def list_projects(
        self,
        db: AsyncSession,
        status: Optional[str] = None,
        client: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[ProjectResponse]:
        query = select(Project).order_by(Project.name)
        if status:
            query = query.where(Project.status == status)
        if client:
            query = query.where(Project.client.ilike(f"%{client.strip()}%"))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(Project.name.ilike(pattern) | Project.description.ilike(pattern))

        with translate_db_errors("list projects"):
            result = await db.execute(query)
            return [to_response(p) for p in result.scalars().all()]

    async def get_project(self, db: AsyncSession, project_id: int) -> ProjectResponse:
        project = await self._get(db, project_id)
        query = (
            select(Allocation, Resource.name)
            .join(Resource, Allocation.resource_id == Resource.id)
            .where(Allocation.project_id == project_id, Allocation.end_date >= date.today())
            .order_by(Allocation.end_date, Allocation.id)
        )
        with translate_db_errors("load project allocations"):
            result = await db.execute(query)
            allocated = [
                allocations.to_response(a, resource_name, project.name, project.client)
                for a, resource_name in result.all()
            ]
        return to_response(project, allocated)

    async def create_project(self, db: AsyncSession, payload: ProjectCreate) -> ProjectResponse:
        name, client = self._validate(payload)

        project = Project(
            name=name,
            client=client,
            description=payload.description,
            start_date=payload.start_date,
            end_date=payload.end_date,
            status=payload.status,
            budget=payload.budget,
            skills=await skill_service.resolve_skills(db, payload.required_skills),
            required_roles=[
                ProjectRole(role=role, count=count)
                for role, count in await self._resolve_roles(db, payload.required_roles)
            ],
        )
        with translate_db_errors("create project"):
            db.add(project)
            await db.flush()
        logger.info("Created project %s (%s / %s)", project.id, project.name, project.client)
        return to_response(project)

    async def update_project(
        self, db: AsyncSession, project_id: int, payload: ProjectUpdate
    ) -> ProjectResponse:
        project = await self._get(db, project_id)
        name, client = self._validate(payload)

        project.name = name
        project.client = client
        project.description = payload.description
        project.start_date = payload.start_date
        project.end_date = payload.end_date
        project.status = payload.status
        project.budget = payload.budget
        if payload.required_skills is not None:
            project.skills = await skill_service.resolve_skills(db, payload.required_skills)
        if payload.required_roles is not None:
            await self._replace_required_roles(db, project, payload.required_roles)

        with translate_db_errors("update project"):
            await db.flush()
        return await self.get_project(db, project_id)

    async def delete_project(self, db: AsyncSession, project_id: int) -> None:
        project = await self._get(db, project_id)
        with translate_db_errors("delete project"):
            allocation_count = await db.scalar(
                select(func.count()).select_from(Allocation).where(
                    Allocation.project_id == project_id
                )
            )
            if allocation_count:
                raise ConflictError(
                    message="Cannot delete project with active allocations. "
                    "Remove allocations first."
                )
            for model in (Milestone, RaidItem, ResourceRequest):
                await db.execute(delete(model).where(model.project_id == project_id))
            await db.delete(project)
            await db.flush()
        logger.info("Deleted project %s", project_id)

    async def ensure_exists(self, db: AsyncSession, project_id: int) -> Project:
        """Used by nested routers (milestones, RAID) to 404 on unknown projects."""
        return await self._get(db, project_id)

    async def _get(self, db: AsyncSession, project_id: int) -> Project:
        with translate_db_errors("fetch project"):
            project = await db.get(Project, project_id)
        if project is None:
            raise NotFoundError(resource="project", resource_id=project_id)
        return project

    async def _resolve_roles(
        self, db: AsyncSession, required: List[RequiredRoleIn]
    ) -> List[Tuple[Role, int]]:
        """(role, count) pairs for known role ids; unknown ids are skipped."""
        counts: Dict[int, int] = {}
        for item in required:
            counts[item.role_id] = item.count
        if not counts:
            return []

        with translate_db_errors("load roles"):
            result = await db.execute(select(Role).where(Role.id.in_(list(counts))))
            roles = {r.id: r for r in result.scalars().all()}

        unknown = sorted(set(counts) - set(roles))
        if unknown:
            logger.warning("Skipping unknown role ids in project requirements: %s", unknown)
        return [(roles[role_id], count) for role_id, count in counts.items() if role_id in roles]

    async def _replace_required_roles(
        self, db: AsyncSession, project: Project, required: List[RequiredRoleIn]
    ) -> None:
        """
        Makes `project.required_roles` match `required`.

        Rows for roles that stay are updated in place; dropped ones are
        removed by the delete-orphan cascade.
        """
        existing = {pr.role_id: pr for pr in project.required_roles}
        updated = []
        for role, count in await self._resolve_roles(db, required):
            link = existing.get(role.id)
            if link is None:
                link = ProjectRole(role=role, count=count)
            else:
                link.count = count
            updated.append(link)
        project.required_roles = updated

    @staticmethod
    def _validate(payload) -> tuple:
        name = payload.name.strip()
        client = payload.client.strip()
        if not name or not client:
            raise ValidationError("Name and client are required")
        if payload.start_date and payload.end_date and payload.end_date < payload.start_date:
            raise ValidationError(
                "End date must be on or after start date", field="end_date"
            )
        return name, client


project_service = ProjectService()
