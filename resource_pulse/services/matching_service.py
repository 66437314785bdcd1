"""
ResourcePulse Backend - Matching Service
========================================

What:  Ranks resources against a project's required skills and roles.
Who:   routes/allocations.py (GET /api/allocations/matches).

Scoring:
    skills  matching required skills / required skills, weighted 60
    role    resource role is one of the project's required roles, weighted 40
    When a project only lists skills (or only roles) that criterion carries
    the full 100, so a score always lands in 0..100.

A candidate is kept when it shares a skill or a role with the project, is
below maxUtilizationPercentage or has an allocation ending within
defaultEndingSoonDays, and scores at least `min_score` (the
matchingThreshold setting unless the caller overrides it).
Roles still short of their required count sort first, then score.
"""

import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy import distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.models.allocation import Allocation
from resource_pulse.models.project import Project
from resource_pulse.models.resource import Resource
from resource_pulse.models.skill import Skill
from resource_pulse.schemas.allocation import ProjectMatches, ResourceMatch, RoleNeed
from resource_pulse.services.allocation_service import allocation_service
from resource_pulse.services.base import translate_db_errors
from resource_pulse.services.project_service import project_service
from resource_pulse.services.settings_service import settings_service

logger = logging.getLogger(__name__)

SKILL_WEIGHT = 60
ROLE_WEIGHT = 40


def match_score(
    matching_skills: int, required_skills: int, role_match: bool, has_required_roles: bool
) -> float:
    """
        >>> match_score(1, 2, True, True)
        70.0
        >>> match_score(2, 2, False, False)
        100.0
    """
    skill_weight = SKILL_WEIGHT if has_required_roles else 100
    role_weight = ROLE_WEIGHT if required_skills else 100
    score = 0.0
    if required_skills:
        score += matching_skills / required_skills * skill_weight
    if has_required_roles and role_match:
        score += role_weight
    return round(score, 1)


class MatchingService:

    async def matches(
        self,
        db: AsyncSession,
        project_id: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> List[ProjectMatches]:
        """
        Matches for one project, or for every Active project with at least one match.

        Raises:
            NotFoundError: unknown `project_id`
        """
        if min_score is None:
            min_score = await settings_service.get_number(db, "matchingThreshold", 60)

        if project_id is not None:
            project = await project_service.ensure_exists(db, project_id)
            return [await self._match_project(db, project, min_score)]

        with translate_db_errors("list active projects"):
            result = await db.scalars(
                select(Project).where(Project.status == "Active").order_by(Project.name)
            )
            projects = list(result.all())

        found = []
        for project in projects:
            matched = await self._match_project(db, project, min_score)
            if matched.resources:
                found.append(matched)
        return found

    async def _match_project(
        self, db: AsyncSession, project: Project, min_score: float
    ) -> ProjectMatches:
        required_skills = {skill.name.lower(): skill.name for skill in project.skills}
        required_roles = {req.role_id: req for req in project.required_roles}

        max_utilization = await settings_service.get_number(db, "maxUtilizationPercentage", 100)
        window = int(await settings_service.get_number(db, "defaultEndingSoonDays", 14))
        horizon = date.today() + timedelta(days=window)

        allocated = await self._allocated_by_role(db, project.id)
        role_needs = [
            RoleNeed(
                role_id=role_id,
                name=req.role.name if req.role is not None else "Unknown",
                count=req.count,
                allocated=allocated.get(role_id, 0),
                needed=max(req.count - allocated.get(role_id, 0), 0),
            )
            for role_id, req in required_roles.items()
        ]
        short_roles = {need.role_id for need in role_needs if need.needed > 0}

        candidates = await self._candidates(db, list(required_skills), list(required_roles))
        current = await allocation_service.current_allocations(
            db, [resource.id for resource in candidates]
        )

        resources = []
        for resource in candidates:
            allocations = current[resource.id]
            total = sum(a.utilization for a in allocations)
            ending_soon = any(a.end_date <= horizon for a in allocations)
            if total < max_utilization:
                status = "available"
            elif ending_soon:
                status = "ending-soon"
            else:
                continue

            matching = [s.name for s in resource.skills if s.name.lower() in required_skills]
            role_match = resource.role_id in required_roles
            score = match_score(
                len(matching), len(required_skills), role_match, bool(required_roles)
            )
            if score < min_score:
                continue

            resources.append(
                ResourceMatch(
                    resource_id=resource.id,
                    name=resource.name,
                    role_id=resource.role_id,
                    role_name=resource.role.name if resource.role is not None else None,
                    role_match=role_match,
                    role_needed=resource.role_id in short_roles,
                    skills=[s.name for s in resource.skills],
                    matching_skills=matching,
                    match_score=score,
                    availability_status=status,
                    total_utilization=total,
                    next_available_date=min((a.end_date for a in allocations), default=None),
                    allocations=allocations,
                )
            )

        resources.sort(key=lambda m: (not m.role_needed, -m.match_score, m.total_utilization, m.name))
        logger.debug(
            "Project %s: %d of %d candidates matched (min_score=%s)",
            project.id, len(resources), len(candidates), min_score,
        )
        return ProjectMatches(
            project_id=project.id,
            name=project.name,
            client=project.client,
            required_skills=list(required_skills.values()),
            required_roles=role_needs,
            roles_needed=[need for need in role_needs if need.needed > 0],
            min_score=min_score,
            resources=resources,
        )

    async def _allocated_by_role(self, db: AsyncSession, project_id: int) -> Dict[int, int]:
        """Distinct resources per role currently allocated to the project."""
        query = (
            select(Resource.role_id, func.count(distinct(Resource.id)))
            .join(Allocation, Allocation.resource_id == Resource.id)
            .where(
                Allocation.project_id == project_id,
                Allocation.end_date >= date.today(),
                Resource.role_id.is_not(None),
            )
            .group_by(Resource.role_id)
        )
        with translate_db_errors("count allocated roles"):
            result = await db.execute(query)
            return {role_id: count for role_id, count in result.all()}

    async def _candidates(
        self, db: AsyncSession, skill_names: List[str], role_ids: List[int]
    ) -> List[Resource]:
        conditions = []
        if skill_names:
            conditions.append(Resource.skills.any(func.lower(Skill.name).in_(skill_names)))
        if role_ids:
            conditions.append(Resource.role_id.in_(role_ids))
        if not conditions:
            return []

        with translate_db_errors("load match candidates"):
            result = await db.scalars(
                select(Resource).where(or_(*conditions)).order_by(Resource.name)
            )
            return list(result.all())


matching_service = MatchingService()
