"""
ResourcePulse Backend - Project Schemas
=======================================

Create and update share the same fields. On update, `required_skills` and
`required_roles` replace the stored sets only when the client sends them;
omitting them (or sending null) leaves the existing links alone.
"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from resource_pulse.schemas.allocation import AllocationResponse

ProjectStatus = Literal["Planning", "Active", "On Hold", "Completed", "Cancelled"]


class RequiredRoleIn(BaseModel):
    role_id: int
    count: int = Field(default=1, ge=1)


class RequiredRoleOut(BaseModel):
    role_id: int
    name: str
    count: int


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    client: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ProjectStatus = "Active"
    budget: Optional[float] = Field(default=None, ge=0)
    required_skills: List[str] = Field(default_factory=list)
    required_roles: List[RequiredRoleIn] = Field(default_factory=list)


class ProjectUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    client: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ProjectStatus = "Active"
    budget: Optional[float] = Field(default=None, ge=0)
    required_skills: Optional[List[str]] = None
    required_roles: Optional[List[RequiredRoleIn]] = None


class ProjectResponse(BaseModel):
    id: int
    name: str
    client: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str
    budget: Optional[float] = None
    required_skills: List[str] = Field(default_factory=list)
    required_roles: List[RequiredRoleOut] = Field(default_factory=list)
    allocated_resources: List[AllocationResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
