"""
ResourcePulse Backend - API Routes Package
==========================================

Route inventory:
    auth.py          /api/auth/register, /login, /refresh, /me
    roles.py         /api/roles
    skills.py        /api/skills
    resources.py     /api/resources
    projects.py      /api/projects
    milestones.py    /api/projects/{project_id}/milestones
    raid.py          /api/projects/{project_id}/raid
    allocations.py   /api/allocations
    settings.py      /api/settings
    requests.py      /api/requests
    audit_logs.py    /api/audit-logs
    health.py        /health

Routes stay thin: parse the request, check roles through dependencies,
call one service method, return its result.
"""

from resource_pulse.routes import (
    allocations,
    audit_logs,
    auth,
    health,
    milestones,
    projects,
    raid,
    requests,
    resources,
    roles,
    settings,
    skills,
)

ROUTERS = [
    health.router,
    auth.router,
    roles.router,
    skills.router,
    resources.router,
    projects.router,
    milestones.router,
    raid.router,
    allocations.router,
    settings.router,
    requests.router,
    audit_logs.router,
]
