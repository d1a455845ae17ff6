"""
Inkwell Backend — AuthorApplication Model
==========================================

What:  A reader's request to be promoted to the author role.
How:   One application per user (unique `user_id`). An application is
       reviewable while `pending` and reviewed exactly once; the review is a
       guarded update on `status = 'pending'`.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.database import Base
from inkwell.models.base import TimestampMixin


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuthorApplication(TimestampMixin, Base):
    __tablename__ = "author_applications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("user_profiles.user_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="Applicant; at most one application per user",
    )

    bio: Mapped[str] = mapped_column(Text, nullable=False)
    credentials: Mapped[str] = mapped_column(Text, nullable=False)
    writing_samples: Mapped[str | None] = mapped_column(Text, nullable=True)
    motivation: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApplicationStatus.PENDING.value,
    )

    # ── Review ────────────────────────────────────────────────────────────
    # All three stay NULL until the single review happens
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("user_profiles.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_author_applications_status",
        ),
        Index("idx_author_applications_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AuthorApplication(id={self.id}, status='{self.status}')>"
