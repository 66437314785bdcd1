"""
ResourcePulse Backend - Resource Routes
=======================================

Every response embeds the resource's skills, its current allocations
(end date today or later) and their summed utilization.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import get_current_user, require_resource_manager
from resource_pulse.schemas.common import ErrorResponse, MessageResponse
from resource_pulse.schemas.resource import ResourceCreate, ResourceResponse, ResourceUpdate
from resource_pulse.services.resource_service import resource_service

router = APIRouter(
    prefix="/api/resources",
    tags=["Resources"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[ResourceResponse], summary="List resources")
async def list_resources(
    skill: Optional[str] = Query(default=None, description="Only resources with this skill"),
    role_id: Optional[int] = Query(default=None),
    search: Optional[str] = Query(default=None, description="Case-insensitive name filter"),
    db: AsyncSession = Depends(get_db_session),
) -> List[ResourceResponse]:
    """Resources with skills, current allocations and total utilization."""
    return await resource_service.list_resources(db, skill=skill, role_id=role_id, search=search)


@router.get(
    "/{resource_id}",
    response_model=ResourceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_resource(
    resource_id: int, db: AsyncSession = Depends(get_db_session)
) -> ResourceResponse:
    """One resource with its current allocations."""
    return await resource_service.get_resource(db, resource_id)


@router.post(
    "",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_resource_manager)],
    responses={400: {"model": ErrorResponse}},
)
async def create_resource(
    payload: ResourceCreate, db: AsyncSession = Depends(get_db_session)
) -> ResourceResponse:
    """Creates a resource; unknown skills are added to the catalogue."""
    return await resource_service.create_resource(db, payload)


@router.put(
    "/{resource_id}",
    response_model=ResourceResponse,
    dependencies=[Depends(require_resource_manager)],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_resource(
    resource_id: int, payload: ResourceUpdate, db: AsyncSession = Depends(get_db_session)
) -> ResourceResponse:
    """Replaces scalar fields; skills change only when sent."""
    return await resource_service.update_resource(db, resource_id, payload)


@router.delete(
    "/{resource_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_resource_manager)],
    responses={404: {"model": ErrorResponse}},
)
async def delete_resource(
    resource_id: int, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    """Deletes a resource together with its allocations."""
    await resource_service.delete_resource(db, resource_id)
    return MessageResponse(message="Resource deleted successfully")
