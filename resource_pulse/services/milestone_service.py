"""Project milestones: list by due date, create, partial update, delete."""

import logging
from typing import List, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import NotFoundError, ValidationError
from resource_pulse.models.milestone import Milestone
from resource_pulse.schemas.common import MessageResponse
from resource_pulse.schemas.milestone import MilestoneCreate, MilestoneResponse, MilestoneUpdate
from resource_pulse.services.base import translate_db_errors
from resource_pulse.services.project_service import project_service

logger = logging.getLogger(__name__)

NO_UPDATES = "No updates provided"
_REQUIRED = ("name", "due_date", "status")


class MilestoneService:

    async def list_milestones(self, db: AsyncSession, project_id: int) -> List[MilestoneResponse]:
        await project_service.ensure_exists(db, project_id)
        with translate_db_errors("list milestones"):
            result = await db.execute(
                select(Milestone)
                .where(Milestone.project_id == project_id)
                .order_by(Milestone.due_date, Milestone.id)
            )
            return [MilestoneResponse.model_validate(m) for m in result.scalars().all()]

    async def create_milestone(
        self, db: AsyncSession, project_id: int, payload: MilestoneCreate
    ) -> MilestoneResponse:
        await project_service.ensure_exists(db, project_id)
        milestone = Milestone(project_id=project_id, **payload.model_dump())
        with translate_db_errors("create milestone"):
            db.add(milestone)
            await db.flush()
        logger.info("Created milestone %s for project %s", milestone.id, project_id)
        return MilestoneResponse.model_validate(milestone)

    async def update_milestone(
        self, db: AsyncSession, project_id: int, milestone_id: int, payload: MilestoneUpdate
    ) -> Union[MilestoneResponse, MessageResponse]:
        """Applies only the fields present in the body."""
        milestone = await self._get(db, project_id, milestone_id)
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            return MessageResponse(message=NO_UPDATES)
        for field in _REQUIRED:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null", field=field)

        for field, value in changes.items():
            setattr(milestone, field, value)
        with translate_db_errors("update milestone"):
            await db.flush()
        return MilestoneResponse.model_validate(milestone)

    async def delete_milestone(self, db: AsyncSession, project_id: int, milestone_id: int) -> None:
        milestone = await self._get(db, project_id, milestone_id)
        with translate_db_errors("delete milestone"):
            await db.delete(milestone)
            await db.flush()

    async def _get(self, db: AsyncSession, project_id: int, milestone_id: int) -> Milestone:
        with translate_db_errors("fetch milestone"):
            milestone = await db.get(Milestone, milestone_id)
        if milestone is None or milestone.project_id != project_id:
            raise NotFoundError(resource="milestone", resource_id=milestone_id)
        return milestone


milestone_service = MilestoneService()
