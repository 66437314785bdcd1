"""Resource contracts. Responses embed skills and current allocations."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from resource_pulse.schemas.allocation import AllocationResponse


class ResourceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    role_id: Optional[int] = None
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    billable_rate: Optional[float] = Field(default=None, ge=0)
    skills: List[str] = Field(default_factory=list)


class ResourceUpdate(BaseModel):
    """Full replacement of the scalar fields; `skills` only when sent."""
    name: str = Field(min_length=1, max_length=200)
    role_id: Optional[int] = None
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    billable_rate: Optional[float] = Field(default=None, ge=0)
    skills: Optional[List[str]] = None


class ResourceResponse(BaseModel):
    id: int
    name: str
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    hourly_rate: Optional[float] = None
    billable_rate: Optional[float] = None
    skills: List[str] = Field(default_factory=list)
    allocations: List[AllocationResponse] = Field(default_factory=list)
    total_utilization: int = 0
    created_at: datetime
    updated_at: datetime
