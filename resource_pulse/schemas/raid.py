"""RAID log contracts (Risks, Assumptions, Issues, Dependencies)."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

RaidType = Literal["Risk", "Assumption", "Issue", "Dependency"]
RaidLevel = Literal["Low", "Medium", "High"]
RaidStatus = Literal["Open", "In Progress", "Mitigated", "Closed"]


class RaidItemCreate(BaseModel):
    type: RaidType
    description: str = Field(min_length=1)
    impact: RaidLevel = "Medium"
    probability: RaidLevel = "Medium"
    status: RaidStatus = "Open"
    owner: Optional[str] = Field(default=None, max_length=200)
    due_date: Optional[date] = None


class RaidItemUpdate(BaseModel):
    type: Optional[RaidType] = None
    description: Optional[str] = Field(default=None, min_length=1)
    impact: Optional[RaidLevel] = None
    probability: Optional[RaidLevel] = None
    status: Optional[RaidStatus] = None
    owner: Optional[str] = Field(default=None, max_length=200)
    due_date: Optional[date] = None


class RaidItemResponse(BaseModel):
    id: int
    project_id: int
    type: str
    description: str
    impact: str
    probability: str
    status: str
    owner: Optional[str] = None
    due_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
