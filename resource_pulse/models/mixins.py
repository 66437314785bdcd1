"""
Shared column definitions for ORM models.

Timestamps are generated in Python rather than by the server. After a flush
SQLAlchemy keeps Python-side values on the instance, whereas server-generated
values are expired and would need an extra (awaited) round trip to read.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Adds `created_at` / `updated_at` (UTC) to a model."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
