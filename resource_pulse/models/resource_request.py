"""Staffing requests raised against a project for a number of people in a role."""

from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from resource_pulse.database import Base
from resource_pulse.models.mixins import TimestampMixin

REQUEST_STATUSES = ("Pending", "Approved", "Rejected", "Fulfilled")


class ResourceRequest(TimestampMixin, Base):
    __tablename__ = "resource_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    role_id: Mapped[int] = mapped_column(Integer, ForeignKey("roles.id"), nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Pending")
    # User id as text, or "System" for unauthenticated submissions
    created_by: Mapped[str] = mapped_column(String(50), nullable=False, default="System")

    __table_args__ = (Index("idx_resource_requests_created_at", "created_at"),)
