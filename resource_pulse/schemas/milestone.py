"""Milestone contracts. Updates are partial: only fields present in the body change."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

MilestoneStatus = Literal["Pending", "In Progress", "Completed", "Missed"]


class MilestoneCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    due_date: date
    description: Optional[str] = None
    status: MilestoneStatus = "Pending"


class MilestoneUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    due_date: Optional[date] = None
    description: Optional[str] = None
    status: Optional[MilestoneStatus] = None


class MilestoneResponse(BaseModel):
    id: int
    project_id: int
    name: str
    due_date: date
    description: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
