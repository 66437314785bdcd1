"""
ResourcePulse Backend - Project Routes
======================================

List responses carry required skills and roles; the detail view adds the
resources currently allocated. Project staff (project and resource
managers) and admins may change projects.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import get_current_user, require_project_staff
from resource_pulse.schemas.common import ErrorResponse, MessageResponse
from resource_pulse.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from resource_pulse.services.project_service import project_service

router = APIRouter(
    prefix="/api/projects",
    tags=["Projects"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[ProjectResponse], summary="List projects")
async def list_projects(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    client: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProjectResponse]:
    """
    What:  Projects with their required skills and roles.
    Who:   The project list and the allocation picker.
    """
    return await project_service.list_projects(
        db, status=status_filter, client=client, search=search
    )


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Project detail with current allocations",
)
async def get_project(
    project_id: int, db: AsyncSession = Depends(get_db_session)
) -> ProjectResponse:
    """One project plus the resources currently allocated to it."""
    return await project_service.get_project(db, project_id)


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_project_staff)],
    responses={400: {"model": ErrorResponse}},
)
async def create_project(
    payload: ProjectCreate, db: AsyncSession = Depends(get_db_session)
) -> ProjectResponse:
    """Creates a project; unknown required skills are added to the catalogue."""
    return await project_service.create_project(db, payload)


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    dependencies=[Depends(require_project_staff)],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_project(
    project_id: int, payload: ProjectUpdate, db: AsyncSession = Depends(get_db_session)
) -> ProjectResponse:
    """Replaces scalar fields; requirements change only when sent."""
    return await project_service.update_project(db, project_id, payload)


@router.delete(
    "/{project_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_project_staff)],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_project(
    project_id: int, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    """Refused with 409 while the project still has allocations."""
    await project_service.delete_project(db, project_id)
    return MessageResponse(message="Project deleted successfully")
