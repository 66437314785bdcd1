"""
ResourcePulse Backend - Resource Request Routes
===============================================

Project managers raise requests; resource managers decide on them.
Project managers only ever see the requests they raised themselves.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import (
    get_current_user,
    require_project_staff,
    require_resource_manager,
)
from resource_pulse.models.user import User
from resource_pulse.schemas.common import ErrorResponse
from resource_pulse.schemas.resource_request import (
    RequestStatusUpdate,
    ResourceRequestCreate,
    ResourceRequestResponse,
)
from resource_pulse.services.request_service import request_service

router = APIRouter(prefix="/api/requests", tags=["Resource Requests"])


@router.get("", response_model=List[ResourceRequestResponse], summary="List resource requests")
async def list_requests(
    project_id: Optional[int] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[ResourceRequestResponse]:
    """
    What:  Resource requests, optionally filtered by project and status.
    Who:   Project managers see their own; resource managers and admins see all.
    """
    return await request_service.list_requests(
        db, viewer=user, project_id=project_id, status=status_filter
    )


@router.post(
    "",
    response_model=ResourceRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def create_request(
    payload: ResourceRequestCreate,
    user: User = Depends(require_project_staff),
    db: AsyncSession = Depends(get_db_session),
) -> ResourceRequestResponse:
    """Raises a request for people of a role on a project."""
    return await request_service.create_request(db, payload, actor=user)


@router.patch(
    "/{request_id}/status",
    response_model=ResourceRequestResponse,
    dependencies=[Depends(require_resource_manager)],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_request_status(
    request_id: int,
    payload: RequestStatusUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ResourceRequestResponse:
    """
    What:  Sets the status of one request (400 for an unknown status).
    Who:   Resource managers working the request queue.
    """
    return await request_service.update_status(db, request_id, payload.status)
