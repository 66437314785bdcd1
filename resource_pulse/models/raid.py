"""
ResourcePulse Backend - RAID Item Model
=======================================

Risks, Assumptions, Issues and Dependencies logged against a project.
Impact and probability use a three-level scale (Low, Medium, High).
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from resource_pulse.database import Base
from resource_pulse.models.mixins import TimestampMixin

RAID_TYPES = ("Risk", "Assumption", "Issue", "Dependency")
RAID_LEVELS = ("Low", "Medium", "High")
RAID_STATUSES = ("Open", "In Progress", "Mitigated", "Closed")


class RaidItem(TimestampMixin, Base):
    __tablename__ = "raid_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    impact: Mapped[str] = mapped_column(String(10), nullable=False, default="Medium")
    probability: Mapped[str] = mapped_column(String(10), nullable=False, default="Medium")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Open")
    owner: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<RaidItem(id={self.id}, type='{self.type}', status='{self.status}')>"
