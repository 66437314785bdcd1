"""System settings: readable by any signed-in user, writable by admins."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.database import get_db_session
from resource_pulse.dependencies import get_current_user, require_admin
from resource_pulse.schemas.common import ErrorResponse
from resource_pulse.schemas.setting import SettingValue
from resource_pulse.services.settings_service import settings_service

router = APIRouter(
    prefix="/api/settings",
    tags=["Settings"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=Dict[str, SettingValue], summary="All settings, typed")
async def get_settings(db: AsyncSession = Depends(get_db_session)) -> Dict[str, SettingValue]:
    """All settings keyed by name, values decoded to their data type."""
    return await settings_service.get_settings(db)


@router.put(
    "",
    response_model=Dict[str, SettingValue],
    dependencies=[Depends(require_admin)],
    responses={400: {"model": ErrorResponse}},
    summary="Update settings from a {key: value} map",
)
async def update_settings(
    values: Dict[str, Any] = Body(..., examples=[{"maxUtilizationPercentage": 120}]),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, SettingValue]:
    """
    What:  Updates any number of settings in one call; unknown keys are ignored.
    Who:   Admins on the settings page. Nothing changes if one value is invalid.
    """
    return await settings_service.update_settings(db, values)
