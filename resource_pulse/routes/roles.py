"""Job role endpoints. Reads need a login; changes need admin or resource_manager."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import get_current_user, require_resource_manager
from resource_pulse.schemas.common import ErrorResponse, MessageResponse
from resource_pulse.schemas.role import RoleCreate, RoleResponse, RoleUpdate
from resource_pulse.services.role_service import role_service

router = APIRouter(
    prefix="/api/roles",
    tags=["Roles"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[RoleResponse], summary="List job roles")
async def list_roles(db: AsyncSession = Depends(get_db_session)) -> List[RoleResponse]:
    """All roles, alphabetically."""
    return await role_service.list_roles(db)


@router.get(
    "/{role_id}",
    response_model=RoleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_role(role_id: int, db: AsyncSession = Depends(get_db_session)) -> RoleResponse:
    """One role by id."""
    return await role_service.get_role(db, role_id)


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_resource_manager)],
    responses={409: {"model": ErrorResponse}},
)
async def create_role(
    payload: RoleCreate, db: AsyncSession = Depends(get_db_session)
) -> RoleResponse:
    """Adds a role; names are unique (409)."""
    return await role_service.create_role(db, payload)


@router.put(
    "/{role_id}",
    response_model=RoleResponse,
    dependencies=[Depends(require_resource_manager)],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_role(
    role_id: int, payload: RoleUpdate, db: AsyncSession = Depends(get_db_session)
) -> RoleResponse:
    """Renames or re-describes a role."""
    return await role_service.update_role(db, role_id, payload)


@router.delete(
    "/{role_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_resource_manager)],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_role(role_id: int, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    """Refused with 409 while resources or projects use the role."""
    await role_service.delete_role(db, role_id)
    return MessageResponse(message="Role deleted successfully")
