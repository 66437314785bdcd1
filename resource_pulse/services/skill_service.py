"""
ResourcePulse Backend - Skill Service
=====================================

What:  Skill catalogue CRUD plus `resolve_skills`, the get-or-create helper
       that projects and resources use to turn submitted names into rows.
How:   Names are matched case-insensitively. Unknown names are inserted in
       the caller's transaction, so a failed project save also discards the
       skills it would have created.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import ConflictError, NotFoundError, ValidationError
from resource_pulse.models.skill import Skill, project_skills, resource_skills
from resource_pulse.schemas.skill import SkillCreate, SkillResponse
from resource_pulse.services.base import translate_db_errors

logger = logging.getLogger(__name__)


def normalize_skill_names(names: List[str]) -> List[str]:
    """
    Trims names, drops blanks and collapses case-insensitive duplicates.

    First spelling wins; order is preserved.
        >>> normalize_skill_names([" Python", "python", "", "SQL"])
        ['Python', 'SQL']
    """
    seen = set()
    cleaned = []
    for raw in names:
        name = (raw or "").strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        cleaned.append(name)
    return cleaned


class SkillService:

    async def list_skills(
        self, db: AsyncSession, search: Optional[str] = None
    ) -> List[SkillResponse]:
        query = select(Skill).order_by(Skill.name)
        if search:
            query = query.where(Skill.name.ilike(f"%{search.strip()}%"))
        with translate_db_errors("list skills"):
            result = await db.execute(query)
            return [SkillResponse.model_validate(s) for s in result.scalars().all()]

    async def create_skill(self, db: AsyncSession, payload: SkillCreate) -> SkillResponse:
        name = payload.name.strip()
        if not name:
            raise ValidationError("Skill name is required", field="name")
        with translate_db_errors("create skill"):
            clash = await db.scalar(
                select(Skill.id).where(func.lower(Skill.name) == name.lower())
            )
            if clash is not None:
                raise ConflictError(message=f"Skill '{name}' already exists")
            skill = Skill(name=name, category=payload.category, description=payload.description)
            db.add(skill)
            await db.flush()
        return SkillResponse.model_validate(skill)

    async def delete_skill(self, db: AsyncSession, skill_id: int) -> None:
        """Deletes the skill and unlinks it from every project and resource."""
        with translate_db_errors("delete skill"):
            skill = await db.get(Skill, skill_id)
            if skill is None:
                raise NotFoundError(resource="skill", resource_id=skill_id)
            await db.execute(delete(project_skills).where(project_skills.c.skill_id == skill_id))
            await db.execute(delete(resource_skills).where(resource_skills.c.skill_id == skill_id))
            await db.delete(skill)
            await db.flush()
        logger.info("Deleted skill %s", skill_id)

    async def resolve_skills(self, db: AsyncSession, names: List[str]) -> List[Skill]:
        """
        Returns Skill rows for `names`, creating the missing ones.

        Raises: DatabaseError when the lookup or insert fails.
        """
        wanted = normalize_skill_names(names)
        if not wanted:
            return []

        with translate_db_errors("resolve skills"):
            result = await db.execute(
                select(Skill).where(func.lower(Skill.name).in_([n.lower() for n in wanted]))
            )
            by_name = {s.name.lower(): s for s in result.scalars().all()}

            created = []
            for name in wanted:
                if name.lower() not in by_name:
                    skill = Skill(name=name)
                    db.add(skill)
                    by_name[name.lower()] = skill
                    created.append(name)
            if created:
                await db.flush()
                logger.info("Created skills on the fly: %s", ", ".join(created))

        return [by_name[n.lower()] for n in wanted]


skill_service = SkillService()
