"""
ResourcePulse Backend - User Model
==================================

What:  Accounts that can sign in to the API.
How:   Emails are stored lower-cased so uniqueness is case-insensitive on
       every backend. The password is stored as an argon2 hash only.
Who:   AuthService (register/login), `get_current_user` dependency.

Roles:
    admin             - everything, including system settings and audit logs
    resource_manager  - resources, allocations, request approval
    project_manager   - projects, milestones, RAID items, raising requests
    user              - read-only access
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from resource_pulse.database import Base
from resource_pulse.models.mixins import TimestampMixin

USER_ROLES = ("admin", "resource_manager", "project_manager", "user")


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="user")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
