"""
ResourcePulse Backend - Allocation Routes
=========================================

`/ending-soon` and `/matches` are declared before `/{allocation_id}` style
paths so they are never captured as an id.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import get_current_user, require_resource_manager
from resource_pulse.schemas.allocation import AllocationResponse, AllocationUpsert, ProjectMatches
from resource_pulse.schemas.common import ErrorResponse, MessageResponse
from resource_pulse.services.allocation_service import allocation_service
from resource_pulse.services.matching_service import matching_service

router = APIRouter(
    prefix="/api/allocations",
    tags=["Allocations"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[AllocationResponse], summary="List allocations")
async def list_allocations(
    resource_id: Optional[int] = Query(default=None),
    project_id: Optional[int] = Query(default=None),
    active_only: bool = Query(default=False, description="Only allocations ending today or later"),
    db: AsyncSession = Depends(get_db_session),
) -> List[AllocationResponse]:
    """All allocations with resource and project names, earliest end date first."""
    return await allocation_service.list_allocations(
        db, resource_id=resource_id, project_id=project_id, active_only=active_only
    )


@router.get(
    "/ending-soon",
    response_model=List[AllocationResponse],
    summary="Allocations ending within N days",
)
async def ending_soon(
    days: Optional[int] = Query(
        default=None, ge=0, le=365,
        description="Window in days; defaults to the defaultEndingSoonDays setting",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[AllocationResponse]:
    """
    What:  Allocations that end between today and today + `days`.
    Who:   The dashboard's roll-off widget.
    """
    return await allocation_service.ending_soon(db, days=days)


@router.get(
    "/matches",
    response_model=List[ProjectMatches],
    responses={404: {"model": ErrorResponse}},
    summary="Rank resources against project requirements",
    description=(
        "With `project_id`, returns a single entry for that project. Without it, "
        "returns every Active project that has at least one match."
    ),
)
async def matches(
    project_id: Optional[int] = Query(default=None),
    min_score: Optional[float] = Query(
        default=None, ge=0, le=100,
        description="Minimum match score; defaults to the matchingThreshold setting",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProjectMatches]:
    """
    What:  Scores resources on skill and role overlap and leaves out anyone
           at capacity without an allocation ending soon.
    Who:   Resource managers staffing a project.
    """
    return await matching_service.matches(db, project_id=project_id, min_score=min_score)


@router.put(
    "/resource/{resource_id}",
    response_model=List[AllocationResponse],
    dependencies=[Depends(require_resource_manager)],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Create or update a resource's allocation to a project",
    description=(
        "Returns the resource's current allocations after the change. Fails with 400 "
        "when the allocation would push the resource past maxUtilizationPercentage."
    ),
)
async def upsert_allocation(
    resource_id: int,
    payload: AllocationUpsert,
    db: AsyncSession = Depends(get_db_session),
) -> List[AllocationResponse]:
    """Allocates a resource to a project, or updates the live allocation in place."""
    return await allocation_service.upsert_for_resource(db, resource_id, payload)


@router.delete(
    "/{allocation_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_resource_manager)],
    responses={404: {"model": ErrorResponse}},
)
async def delete_allocation(
    allocation_id: int, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    """Removes one allocation."""
    await allocation_service.delete_allocation(db, allocation_id)
    return MessageResponse(message="Allocation removed successfully")
