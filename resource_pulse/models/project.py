"""
ResourcePulse Backend - Project Model
=====================================

What:  Client projects plus the roles they need staffed.
How:   `skills` and `required_roles` are eager (selectin) collections.
       `required_roles` owns its rows (delete-orphan), so assigning a new
       list replaces the requirements in the same flush.

Status values: Planning, Active, On Hold, Completed, Cancelled.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from resource_pulse.database import Base
from resource_pulse.models.mixins import TimestampMixin
from resource_pulse.models.role import Role
from resource_pulse.models.skill import Skill, project_skills

PROJECT_STATUSES = ("Planning", "Active", "On Hold", "Completed", "Cancelled")


class Project(TimestampMixin, Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    client: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="Active")
    budget: Mapped[Optional[float]] = mapped_column(
        Numeric(14, 2, asdecimal=False), nullable=True
    )

    skills: Mapped[List[Skill]] = relationship(
        secondary=project_skills,
        lazy="selectin",
        order_by=Skill.name,
    )
    required_roles: Mapped[List["ProjectRole"]] = relationship(
        back_populates="project",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}', client='{self.client}')>"


class ProjectRole(Base):
    """How many people of a given role a project needs."""

    __tablename__ = "project_roles"

    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True
    )
    role_id: Mapped[int] = mapped_column(Integer, ForeignKey("roles.id"), primary_key=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    project: Mapped[Project] = relationship(back_populates="required_roles")
    role: Mapped[Role] = relationship(lazy="selectin")
