"""
ResourcePulse Backend - System Setting Model
============================================

Key/value configuration editable at runtime by administrators. Values are
stored as text; `data_type` (string, number, boolean, json) tells
SettingsService how to decode them.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from resource_pulse.database import Base
from resource_pulse.models.mixins import utcnow

SETTING_DATA_TYPES = ("string", "number", "boolean", "json")


class SystemSetting(Base):
    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    data_type: Mapped[str] = mapped_column(String(20), nullable=False, default="string")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<SystemSetting(key='{self.key}', data_type='{self.data_type}')>"
