"""
ResourcePulse Backend - ORM Models Package
==========================================

Importing this package registers every table with `Base.metadata`.
Alembic's env.py and the test suite rely on that side effect.
"""

from resource_pulse.models.allocation import Allocation
from resource_pulse.models.audit_log import AuditLog
from resource_pulse.models.milestone import Milestone
from resource_pulse.models.project import Project, ProjectRole
from resource_pulse.models.raid import RaidItem
from resource_pulse.models.resource import Resource
from resource_pulse.models.resource_request import ResourceRequest
from resource_pulse.models.role import Role
from resource_pulse.models.setting import SystemSetting
from resource_pulse.models.skill import Skill, project_skills, resource_skills
from resource_pulse.models.user import User

__all__ = [
    "Allocation",
    "AuditLog",
    "Milestone",
    "Project",
    "ProjectRole",
    "RaidItem",
    "Resource",
    "ResourceRequest",
    "Role",
    "Skill",
    "SystemSetting",
    "User",
    "project_skills",
    "resource_skills",
]
