"""Milestones nested under a project."""

from typing import List, Union

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import get_current_user, require_project_staff
from resource_pulse.schemas.common import ErrorResponse, MessageResponse
from resource_pulse.schemas.milestone import MilestoneCreate, MilestoneResponse, MilestoneUpdate
from resource_pulse.services.milestone_service import milestone_service

router = APIRouter(
    prefix="/api/projects/{project_id}/milestones",
    tags=["Milestones"],
    dependencies=[Depends(get_current_user)],
)


@router.get(
    "",
    response_model=List[MilestoneResponse],
    responses={404: {"model": ErrorResponse}},
    summary="List a project's milestones by due date",
)
async def list_milestones(
    project_id: int, db: AsyncSession = Depends(get_db_session)
) -> List[MilestoneResponse]:
    """Milestones of one project, earliest due date first."""
    return await milestone_service.list_milestones(db, project_id)


@router.post(
    "",
    response_model=MilestoneResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_project_staff)],
    responses={404: {"model": ErrorResponse}},
)
async def create_milestone(
    project_id: int, payload: MilestoneCreate, db: AsyncSession = Depends(get_db_session)
) -> MilestoneResponse:
    """Adds a milestone to the project."""
    return await milestone_service.create_milestone(db, project_id, payload)


@router.put(
    "/{milestone_id}",
    response_model=Union[MilestoneResponse, MessageResponse],
    dependencies=[Depends(require_project_staff)],
    responses={404: {"model": ErrorResponse}},
    summary="Partially update a milestone",
)
async def update_milestone(
    project_id: int,
    milestone_id: int,
    payload: MilestoneUpdate,
    db: AsyncSession = Depends(get_db_session),
):
    """Partial update; only the fields sent are changed."""
    return await milestone_service.update_milestone(db, project_id, milestone_id, payload)


@router.delete(
    "/{milestone_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_project_staff)],
    responses={404: {"model": ErrorResponse}},
)
async def delete_milestone(
    project_id: int, milestone_id: int, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    """Removes one milestone."""
    await milestone_service.delete_milestone(db, project_id, milestone_id)
    return MessageResponse(message="Milestone deleted successfully")
