"""Job role CRUD."""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import ConflictError, NotFoundError, ValidationError
from resource_pulse.models.project import ProjectRole
from resource_pulse.models.resource import Resource
from resource_pulse.models.resource_request import ResourceRequest
from resource_pulse.models.role import Role
from resource_pulse.schemas.role import RoleCreate, RoleResponse, RoleUpdate
from resource_pulse.services.base import translate_db_errors

logger = logging.getLogger(__name__)


class RoleService:

    async def list_roles(self, db: AsyncSession) -> List[RoleResponse]:
        with translate_db_errors("list roles"):
            result = await db.execute(select(Role).order_by(Role.name))
            return [RoleResponse.model_validate(r) for r in result.scalars().all()]

    async def get_role(self, db: AsyncSession, role_id: int) -> RoleResponse:
        return RoleResponse.model_validate(await self._get(db, role_id))

    async def create_role(self, db: AsyncSession, payload: RoleCreate) -> RoleResponse:
        name = self._clean_name(payload.name)
        with translate_db_errors("create role"):
            await self._ensure_unique(db, name)
            role = Role(name=name, description=payload.description)
            db.add(role)
            await db.flush()
        logger.info("Created role %s (%s)", role.id, role.name)
        return RoleResponse.model_validate(role)

    async def update_role(
        self, db: AsyncSession, role_id: int, payload: RoleUpdate
    ) -> RoleResponse:
        role = await self._get(db, role_id)
        name = self._clean_name(payload.name)
        with translate_db_errors("update role"):
            if name.lower() != role.name.lower():
                await self._ensure_unique(db, name)
            role.name = name
            role.description = payload.description
            await db.flush()
        return RoleResponse.model_validate(role)

    async def delete_role(self, db: AsyncSession, role_id: int) -> None:
        """Refuses to delete roles still held by resources, projects or requests."""
        role = await self._get(db, role_id)
        with translate_db_errors("delete role"):
            for model in (Resource, ProjectRole, ResourceRequest):
                in_use = await db.scalar(
                    select(func.count()).select_from(model).where(model.role_id == role_id)
                )
                if in_use:
                    raise ConflictError(
                        message="Cannot delete role that is assigned to resources, "
                        "projects or requests"
                    )
            await db.delete(role)
            await db.flush()
        logger.info("Deleted role %s", role_id)

    async def _get(self, db: AsyncSession, role_id: int) -> Role:
        with translate_db_errors("fetch role"):
            role = await db.get(Role, role_id)
        if role is None:
            raise NotFoundError(resource="role", resource_id=role_id)
        return role

    async def _ensure_unique(self, db: AsyncSession, name: str) -> None:
        clash = await db.scalar(select(Role.id).where(func.lower(Role.name) == name.lower()))
        if clash is not None:
            raise ConflictError(message=f"Role '{name}' already exists")

    @staticmethod
    def _clean_name(name: str) -> str:
        name = name.strip()
        if not name:
            raise ValidationError("Role name is required", field="name")
        return name


role_service = RoleService()
