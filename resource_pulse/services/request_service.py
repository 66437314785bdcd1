"""
ResourcePulse Backend - Resource Request Service
================================================

What:  Staffing requests: project managers ask for N people in a role,
       resource managers approve, reject or mark them fulfilled.
Visibility:
    project_manager   -> only requests they created
    everyone else     -> all requests
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import NotFoundError, ValidationError
from resource_pulse.models.project import Project
from resource_pulse.models.resource_request import REQUEST_STATUSES, ResourceRequest
from resource_pulse.models.role import Role
from resource_pulse.models.user import User
from resource_pulse.schemas.resource_request import (
    ResourceRequestCreate,
    ResourceRequestResponse,
)
from resource_pulse.services.base import translate_db_errors

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "System"


def to_response(
    request: ResourceRequest,
    project_name: Optional[str],
    client: Optional[str],
    role_name: Optional[str],
) -> ResourceRequestResponse:
    return ResourceRequestResponse(
        id=request.id,
        project_id=request.project_id,
        project_name=project_name,
        client=client,
        role_id=request.role_id,
        role_name=role_name,
        count=request.count,
        start_date=request.start_date,
        end_date=request.end_date,
        notes=request.notes,
        status=request.status,
        created_by=request.created_by,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


def _joined_query():
    return (
        select(ResourceRequest, Project.name, Project.client, Role.name)
        .join(Project, ResourceRequest.project_id == Project.id)
        .join(Role, ResourceRequest.role_id == Role.id)
    )


class RequestService:

    async def list_requests(
        self,
        db: AsyncSession,
        viewer: User,
        project_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[ResourceRequestResponse]:
        query = _joined_query()
        if viewer.role == "project_manager":
            query = query.where(ResourceRequest.created_by == str(viewer.id))
        if project_id is not None:
            query = query.where(ResourceRequest.project_id == project_id)
        if status:
            query = query.where(ResourceRequest.status == status)
        query = query.order_by(ResourceRequest.created_at.desc(), ResourceRequest.id.desc())

        with translate_db_errors("list resource requests"):
            result = await db.execute(query)
            return [to_response(*row) for row in result.all()]

    async def create_request(
        self,
        db: AsyncSession,
        payload: ResourceRequestCreate,
        actor: Optional[User] = None,
    ) -> ResourceRequestResponse:
        if payload.start_date and payload.end_date and payload.end_date < payload.start_date:
            raise ValidationError("End date must be on or after start date", field="end_date")

        with translate_db_errors("create resource request"):
            project = await db.get(Project, payload.project_id)
            if project is None:
                raise NotFoundError(resource="project", resource_id=payload.project_id)
            role = await db.get(Role, payload.role_id)
            if role is None:
                raise NotFoundError(resource="role", resource_id=payload.role_id)

            request = ResourceRequest(
                project_id=project.id,
                role_id=role.id,
                count=payload.count,
                start_date=payload.start_date,
                end_date=payload.end_date,
                notes=payload.notes,
                status="Pending",
                created_by=str(actor.id) if actor is not None else SYSTEM_ACTOR,
            )
            db.add(request)
            await db.flush()

        logger.info(
            "Resource request %s raised for project %s (%d x %s)",
            request.id, project.id, request.count, role.name,
        )
        return to_response(request, project.name, project.client, role.name)

    async def update_status(
        self, db: AsyncSession, request_id: int, status: str
    ) -> ResourceRequestResponse:
        if status not in REQUEST_STATUSES:
            raise ValidationError(
                f"Invalid status. Must be one of: {', '.join(REQUEST_STATUSES)}",
                field="status",
            )

        with translate_db_errors("update resource request"):
            row = (await db.execute(
                _joined_query().where(ResourceRequest.id == request_id)
            )).one_or_none()
            if row is None:
                raise NotFoundError(resource="resource request", resource_id=request_id)
            request = row[0]
            request.status = status
            await db.flush()

        logger.info("Resource request %s -> %s", request_id, status)
        return to_response(*row)


request_service = RequestService()
