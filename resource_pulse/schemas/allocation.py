"""
ResourcePulse Backend - Allocation Schemas
==========================================

`AllocationUpsert` is deliberately loose on `utilization`: the 1..150 range is
a business rule checked by AllocationService so that it answers 400 with a
readable message instead of a schema 422.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AllocationUpsert(BaseModel):
    project_id: int
    start_date: date
    end_date: date
    utilization: int
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    billable_rate: Optional[float] = Field(default=None, ge=0)
    total_hours: Optional[float] = Field(default=None, ge=0)
    is_billable: bool = True
    billing_type: str = Field(default="Hourly", max_length=50)


class AllocationResponse(BaseModel):
    id: int
    resource_id: int
    resource_name: Optional[str] = None
    project_id: int
    project_name: Optional[str] = None
    client: Optional[str] = None
    start_date: date
    end_date: date
    utilization: int
    hourly_rate: Optional[float] = None
    billable_rate: Optional[float] = None
    total_hours: float
    total_cost: Optional[float] = None
    billable_amount: Optional[float] = None
    is_billable: bool
    billing_type: str
    created_at: datetime
    updated_at: datetime


class RoleNeed(BaseModel):
    role_id: int
    name: str
    count: int
    allocated: int = 0
    needed: int = 0


class ResourceMatch(BaseModel):
    resource_id: int
    name: str
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    role_match: bool
    role_needed: bool
    skills: List[str] = Field(default_factory=list)
    matching_skills: List[str] = Field(default_factory=list)
    match_score: float
    # available | ending-soon
    availability_status: str
    total_utilization: int
    next_available_date: Optional[date] = None
    allocations: List[AllocationResponse] = Field(default_factory=list)


class ProjectMatches(BaseModel):
    project_id: int
    name: str
    client: str
    required_skills: List[str] = Field(default_factory=list)
    required_roles: List[RoleNeed] = Field(default_factory=list)
    roles_needed: List[RoleNeed] = Field(default_factory=list)
    min_score: float
    resources: List[ResourceMatch] = Field(default_factory=list)
