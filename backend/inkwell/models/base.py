"""
Shared column helpers for the ORM models.

Every timestamp is stored timezone-aware in UTC. The Python-side defaults
let rows be created on any backend (PostgreSQL in production, SQLite in
the test suite); the migration adds matching server defaults.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Adds `created_at` / `updated_at`; `updated_at` moves on every UPDATE."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        comment="Row creation time (UTC)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        comment="Last modification time (UTC)",
    )
