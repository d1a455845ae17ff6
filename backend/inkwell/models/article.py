"""
Inkwell Backend — Article Model
================================

What:  ORM model for the `articles` table.
Who:   Read by the public listing, SEO and reading-history services;
       status-mutated only by the workflow in the moderation and article
       services.

Lifecycle:
    draft ──submit──▶ pending_approval ──approve──▶ published ──unpublish──▶ archived
                            │
                            └──reject──▶ draft

    Rows are never physically deleted by the workflow; `deleted_at` marks a
    soft delete and every query filters on `deleted_at IS NULL`.

Query Patterns:
    - Public listing:  WHERE status = 'published' AND deleted_at IS NULL
                       ORDER BY published_at DESC
      → idx_articles_status_published_at
    - Moderation queue: WHERE status = 'pending_approval' ORDER BY created_at DESC
    - Detail page:     WHERE slug = :slug AND language = :language
      → uq_articles_slug_language
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.database import Base
from inkwell.models.base import TimestampMixin


class ArticleStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Article(TimestampMixin, Base):
    """A bilingual article; one row per (slug, language) version."""

    __tablename__ = "articles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("user_profiles.user_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # ── Content ───────────────────────────────────────────────────────────
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    language: Mapped[str] = mapped_column(String(5), nullable=False, default="th")
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    featured_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # ── Workflow ──────────────────────────────────────────────────────────
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ArticleStatus.DRAFT.value,
        comment="draft, pending_approval, published, archived",
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # ── SEO ───────────────────────────────────────────────────────────────
    seo_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    seo_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    seo_keywords: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Comma separated"
    )

    # ── Counters ──────────────────────────────────────────────────────────
    reading_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="Soft-delete marker"
    )

    __table_args__ = (
        UniqueConstraint("slug", "language", name="uq_articles_slug_language"),
        CheckConstraint(
            "status IN ('draft', 'pending_approval', 'published', 'archived')",
            name="ck_articles_status",
        ),
        CheckConstraint("language IN ('en', 'th')", name="ck_articles_language"),
        CheckConstraint("view_count >= 0", name="ck_articles_view_count"),
        Index("idx_articles_status_published_at", status, published_at.desc()),
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<Article(id={self.id}, slug='{self.slug}', status='{self.status}')>"
