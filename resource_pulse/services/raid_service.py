"""
ResourcePulse Backend - RAID Log Service
========================================

Risks, Assumptions, Issues and Dependencies per project. Listing is newest
first with an optional `type` filter; updates are partial and an empty body
changes nothing.
"""

import logging
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import NotFoundError, ValidationError
from resource_pulse.models.raid import RaidItem
from resource_pulse.schemas.common import MessageResponse
from resource_pulse.schemas.raid import RaidItemCreate, RaidItemResponse, RaidItemUpdate
from resource_pulse.services.base import translate_db_errors
from resource_pulse.services.milestone_service import NO_UPDATES
from resource_pulse.services.project_service import project_service

logger = logging.getLogger(__name__)

_REQUIRED = ("type", "description", "impact", "probability", "status")


class RaidService:

    async def list_items(
        self, db: AsyncSession, project_id: int, item_type: Optional[str] = None
    ) -> List[RaidItemResponse]:
        await project_service.ensure_exists(db, project_id)
        query = select(RaidItem).where(RaidItem.project_id == project_id)
        if item_type:
            query = query.where(RaidItem.type == item_type)
        query = query.order_by(RaidItem.created_at.desc(), RaidItem.id.desc())
        with translate_db_errors("list RAID items"):
            result = await db.execute(query)
            return [RaidItemResponse.model_validate(i) for i in result.scalars().all()]

    async def create_item(
        self, db: AsyncSession, project_id: int, payload: RaidItemCreate
    ) -> RaidItemResponse:
        await project_service.ensure_exists(db, project_id)
        item = RaidItem(project_id=project_id, **payload.model_dump())
        with translate_db_errors("create RAID item"):
            db.add(item)
            await db.flush()
        logger.info("Logged %s %s for project %s", item.type, item.id, project_id)
        return RaidItemResponse.model_validate(item)

    async def update_item(
        self, db: AsyncSession, project_id: int, item_id: int, payload: RaidItemUpdate
    ) -> Union[RaidItemResponse, MessageResponse]:
        item = await self._get(db, project_id, item_id)
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            return MessageResponse(message=NO_UPDATES)
        for field in _REQUIRED:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null", field=field)

        for field, value in changes.items():
            setattr(item, field, value)
        with translate_db_errors("update RAID item"):
            await db.flush()
        return RaidItemResponse.model_validate(item)

    async def delete_item(self, db: AsyncSession, project_id: int, item_id: int) -> None:
        item = await self._get(db, project_id, item_id)
        with translate_db_errors("delete RAID item"):
            await db.delete(item)
            await db.flush()

    async def _get(self, db: AsyncSession, project_id: int, item_id: int) -> RaidItem:
        with translate_db_errors("fetch RAID item"):
            item = await db.get(RaidItem, item_id)
        if item is None or item.project_id != project_id:
            raise NotFoundError(resource="RAID item", resource_id=item_id)
        return item


raid_service = RaidService()
