"""Skill catalogue endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import get_current_user, require_project_staff
from resource_pulse.schemas.common import ErrorResponse, MessageResponse
from resource_pulse.schemas.skill import SkillCreate, SkillResponse
from resource_pulse.services.skill_service import skill_service

router = APIRouter(
    prefix="/api/skills",
    tags=["Skills"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[SkillResponse], summary="List skills")
async def list_skills(
    search: Optional[str] = Query(default=None, description="Case-insensitive name filter"),
    db: AsyncSession = Depends(get_db_session),
) -> List[SkillResponse]:
    """Skill catalogue, alphabetically."""
    return await skill_service.list_skills(db, search=search)


@router.post(
    "",
    response_model=SkillResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_project_staff)],
    responses={409: {"model": ErrorResponse}},
)
async def create_skill(
    payload: SkillCreate, db: AsyncSession = Depends(get_db_session)
) -> SkillResponse:
    """Adds a skill; names are unique (409)."""
    return await skill_service.create_skill(db, payload)


@router.delete(
    "/{skill_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_project_staff)],
    responses={404: {"model": ErrorResponse}},
)
async def delete_skill(
    skill_id: int, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    """Deletes the skill and unlinks it from projects and resources."""
    await skill_service.delete_skill(db, skill_id)
    return MessageResponse(message="Skill deleted successfully")
