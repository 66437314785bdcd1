"""Audit log contracts."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: int
    entity_name: str
    entity_id: str
    action: str
    changed_by: str
    old_values: Optional[Any] = None
    new_values: Optional[Any] = None
    request_path: Optional[str] = None
    ip_address: Optional[str] = None
    change_date: datetime

    model_config = {"from_attributes": True}
