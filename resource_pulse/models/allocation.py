"""
ResourcePulse Backend - Allocation Model
========================================

What:  Assignment of a resource to a project for a date range at a given
       utilization percentage, with the financial figures derived from it.
Who:   AllocationService writes rows; resource and project responses read
       the current ones (end_date >= today).

Derived columns (computed by AllocationService on every write):
    total_hours      = work days x 8 x utilization / 100 (unless supplied)
    total_cost       = hourly_rate x total_hours
    billable_amount  = billable_rate x total_hours when is_billable
"""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from resource_pulse.database import Base
from resource_pulse.models.mixins import TimestampMixin


class Allocation(TimestampMixin, Base):
    __tablename__ = "allocations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    resource_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("resources.id", ondelete="CASCADE"), nullable=False
    )
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    utilization: Mapped[int] = mapped_column(Integer, nullable=False)

    hourly_rate: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    billable_rate: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    total_hours: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=False, default=0
    )
    total_cost: Mapped[Optional[float]] = mapped_column(
        Numeric(14, 2, asdecimal=False), nullable=True
    )
    billable_amount: Mapped[Optional[float]] = mapped_column(
        Numeric(14, 2, asdecimal=False), nullable=True
    )
    is_billable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    billing_type: Mapped[str] = mapped_column(String(32), nullable=False, default="Hourly")

    # Capacity checks and "current allocations" both filter on these.
    __table_args__ = (
        Index("idx_allocations_resource_end", "resource_id", "end_date"),
        Index("idx_allocations_project", "project_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Allocation(id={self.id}, resource_id={self.resource_id}, "
            f"project_id={self.project_id}, utilization={self.utilization})>"
        )
