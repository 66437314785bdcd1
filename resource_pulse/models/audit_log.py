"""
ResourcePulse Backend - Audit Log Model
=======================================

What:  One row per successful mutating API call.
Who:   Written by AuditMiddleware, read by AuditService.
How:   `new_values` holds the JSON request body (passwords redacted).
       `old_values` is reserved; the middleware never sees the prior state.

Index on change_date: the listing endpoint always sorts newest first and
usually filters by a date range.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from resource_pulse.database import Base
from resource_pulse.models.mixins import utcnow


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_name: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(50), nullable=False, default="N/A")
    action: Mapped[str] = mapped_column(String(10), nullable=False)
    changed_by: Mapped[str] = mapped_column(String(50), nullable=False, default="Anonymous")
    old_values: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    new_values: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    request_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    change_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("idx_audit_logs_change_date", "change_date"),
        Index("idx_audit_logs_entity", "entity_name", "entity_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, action='{self.action}', "
            f"entity='{self.entity_name}:{self.entity_id}')>"
        )
