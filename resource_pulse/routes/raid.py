"""RAID log entries nested under a project."""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import get_current_user, require_project_staff
from resource_pulse.schemas.common import ErrorResponse, MessageResponse
from resource_pulse.schemas.raid import RaidItemCreate, RaidItemResponse, RaidItemUpdate, RaidType
from resource_pulse.services.raid_service import raid_service

router = APIRouter(
    prefix="/api/projects/{project_id}/raid",
    tags=["RAID"],
    dependencies=[Depends(get_current_user)],
)


@router.get(
    "",
    response_model=List[RaidItemResponse],
    responses={404: {"model": ErrorResponse}},
    summary="List a project's RAID items, newest first",
)
async def list_raid_items(
    project_id: int,
    item_type: Optional[RaidType] = Query(default=None, alias="type"),
    db: AsyncSession = Depends(get_db_session),
) -> List[RaidItemResponse]:
    """RAID log of one project, newest first."""
    return await raid_service.list_items(db, project_id, item_type=item_type)


@router.post(
    "",
    response_model=RaidItemResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_project_staff)],
    responses={404: {"model": ErrorResponse}},
)
async def create_raid_item(
    project_id: int, payload: RaidItemCreate, db: AsyncSession = Depends(get_db_session)
) -> RaidItemResponse:
    """Logs a risk, assumption, issue or dependency."""
    return await raid_service.create_item(db, project_id, payload)


@router.put(
    "/{item_id}",
    response_model=Union[RaidItemResponse, MessageResponse],
    dependencies=[Depends(require_project_staff)],
    responses={404: {"model": ErrorResponse}},
)
async def update_raid_item(
    project_id: int,
    item_id: int,
    payload: RaidItemUpdate,
    db: AsyncSession = Depends(get_db_session),
):
    """Partial update; only the fields sent are changed."""
    return await raid_service.update_item(db, project_id, item_id, payload)


@router.delete(
    "/{item_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_project_staff)],
    responses={404: {"model": ErrorResponse}},
)
async def delete_raid_item(
    project_id: int, item_id: int, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    """Removes one RAID item."""
    await raid_service.delete_item(db, project_id, item_id)
    return MessageResponse(message="RAID item deleted successfully")
