"""
Inkwell Backend — Audit Trail Models
=====================================

What:  Append-only records of administrative actions.
How:   `AuditLog` rows are written by AuditService in the same transaction
       as the mutation they describe; `RoleChangeLog` rows record every
       role promotion. Neither table is ever updated or deleted by the
       application.
"""

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.database import Base
from inkwell.models.base import utc_now


class AuditLog(Base):
    """One administrative action, its actor and its outcome."""

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    action: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="e.g. article_rejected"
    )
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)

    actor_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("user_profiles.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    actor_role: Mapped[str | None] = mapped_column(String(20), nullable=True)

    details: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        Index("idx_audit_logs_entity", "entity_type", "entity_id"),
        Index("idx_audit_logs_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog(action='{self.action}', entity={self.entity_type}:"
            f"{self.entity_id}, success={self.success})>"
        )


class RoleChangeLog(Base):
    """A change of a user's role, with who made it and why."""

    __tablename__ = "role_change_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("user_profiles.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    old_role: Mapped[str] = mapped_column(String(20), nullable=False)
    new_role: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("user_profiles.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
