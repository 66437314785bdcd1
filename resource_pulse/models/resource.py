"""
ResourcePulse Backend - Resource Model
======================================

What:  A person who can be allocated to projects.
How:   `role` and `skills` load eagerly with selectin because every resource
       response includes them. Allocations are queried separately since
       responses only show the current ones.
"""

from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from resource_pulse.database import Base
from resource_pulse.models.mixins import TimestampMixin
from resource_pulse.models.role import Role
from resource_pulse.models.skill import Skill, resource_skills


class Resource(TimestampMixin, Base):
    __tablename__ = "resources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    role_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("roles.id"), nullable=True
    )
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # asdecimal=False: rates travel as floats through the API
    hourly_rate: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    billable_rate: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )

    role: Mapped[Optional[Role]] = relationship(lazy="selectin")
    skills: Mapped[List[Skill]] = relationship(
        secondary=resource_skills,
        lazy="selectin",
        order_by=Skill.name,
    )

    def __repr__(self) -> str:
        return f"<Resource(id={self.id}, name='{self.name}')>"
