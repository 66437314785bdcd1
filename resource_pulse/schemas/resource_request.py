"""Resource request contracts."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class ResourceRequestCreate(BaseModel):
    project_id: int
    role_id: int
    count: int = Field(default=1, ge=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None


class RequestStatusUpdate(BaseModel):
    # Checked against the allowed values in the service (400, not 422)
    status: str


class ResourceRequestResponse(BaseModel):
    id: int
    project_id: int
    project_name: Optional[str] = None
    client: Optional[str] = None
    role_id: int
    role_name: Optional[str] = None
    count: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    status: str
    created_by: str
    created_at: datetime
    updated_at: datetime
