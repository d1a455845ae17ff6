"""
Inkwell Backend — UserProfile Model
====================================

What:  ORM model for the `user_profiles` table.
How:   One row per account of the hosted auth provider. The primary key is
       the provider's user id (the `sub` claim of the access token).
Who:   Loaded by the auth dependency on every authenticated request;
       updated by the preferences service, by author-application review
       and by admin user management (role changes, deactivation).

Roles:
    reader < author < admin. New profiles start as readers; the only
    automatic promotion is an approved author application.
"""

import enum
import uuid

from sqlalchemy import Boolean, CheckConstraint, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.database import Base
from inkwell.models.base import TimestampMixin


class UserRole(str, enum.Enum):
    READER = "reader"
    AUTHOR = "author"
    ADMIN = "admin"


class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 24


class UserProfile(TimestampMixin, Base):
    """Application-side profile of an authenticated user."""

    __tablename__ = "user_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        comment="User id issued by the hosted auth provider",
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ── Authorization ─────────────────────────────────────────────────────
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.READER.value,
        comment="reader, author or admin",
    )
    # Deactivated profiles are rejected by the auth dependency
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # ── Reader Preferences ────────────────────────────────────────────────
    language_preference: Mapped[str] = mapped_column(
        String(5), nullable=False, default="th"
    )
    theme_preference: Mapped[str] = mapped_column(
        String(10), nullable=False, default=Theme.SYSTEM.value
    )
    reading_font_size: Mapped[int] = mapped_column(
        Integer, nullable=False, default=16
    )
    accessibility_mode: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('reader', 'author', 'admin')", name="ck_user_profiles_role"
        ),
        CheckConstraint(
            "language_preference IN ('en', 'th')", name="ck_user_profiles_language"
        ),
        CheckConstraint(
            "theme_preference IN ('light', 'dark', 'system')",
            name="ck_user_profiles_theme",
        ),
        CheckConstraint(
            f"reading_font_size BETWEEN {MIN_FONT_SIZE} AND {MAX_FONT_SIZE}",
            name="ck_user_profiles_font_size",
        ),
    )

    def __repr__(self) -> str:
        return f"<UserProfile(user_id={self.user_id}, role='{self.role}')>"
