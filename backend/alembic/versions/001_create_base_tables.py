"""Create base tables

Revision ID: 001
Revises: None
Create Date: 2026-01-15 00:00:00.000000+00:00

What:  Creates user_profiles, articles, author_applications, reading_history,
       audit_logs and role_change_logs.
How:   PostgreSQL UUID keys with gen_random_uuid() defaults and
       TIMESTAMP WITH TIME ZONE columns defaulting to CURRENT_TIMESTAMP.
       The status vocabularies are enforced with CHECK constraints.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _uuid_pk():
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def upgrade() -> None:
    # ── user_profiles ─────────────────────────────────────────────────────
    op.create_table(
        "user_profiles",
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="User id issued by the hosted auth provider",
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'reader'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "language_preference", sa.String(5), nullable=False, server_default=sa.text("'th'")
        ),
        sa.Column(
            "theme_preference", sa.String(10), nullable=False, server_default=sa.text("'system'")
        ),
        sa.Column(
            "reading_font_size", sa.Integer(), nullable=False, server_default=sa.text("16")
        ),
        sa.Column(
            "accessibility_mode", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("user_id"),
        sa.UniqueConstraint("email"),
        sa.CheckConstraint("role IN ('reader', 'author', 'admin')", name="ck_user_profiles_role"),
        sa.CheckConstraint(
            "language_preference IN ('en', 'th')", name="ck_user_profiles_language"
        ),
        sa.CheckConstraint(
            "theme_preference IN ('light', 'dark', 'system')", name="ck_user_profiles_theme"
        ),
        sa.CheckConstraint(
            "reading_font_size BETWEEN 12 AND 24", name="ck_user_profiles_font_size"
        ),
    )

    # ── articles ──────────────────────────────────────────────────────────
    op.create_table(
        "articles",
        _uuid_pk(),
        sa.Column("author_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("language", sa.String(5), nullable=False, server_default=sa.text("'th'")),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("featured_image_url", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'draft'"),
            comment="draft, pending_approval, published, archived",
        ),
        sa.Column("published_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("seo_title", sa.String(255), nullable=True),
        sa.Column("seo_description", sa.Text(), nullable=True),
        sa.Column("seo_keywords", sa.Text(), nullable=True, comment="Comma separated"),
        sa.Column("reading_time_minutes", sa.Integer(), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "deleted_at", sa.TIMESTAMP(timezone=True), nullable=True, comment="Soft-delete marker"
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["author_id"], ["user_profiles.user_id"], ondelete="RESTRICT"
        ),
        sa.UniqueConstraint("slug", "language", name="uq_articles_slug_language"),
        sa.CheckConstraint(
            "status IN ('draft', 'pending_approval', 'published', 'archived')",
            name="ck_articles_status",
        ),
        sa.CheckConstraint("language IN ('en', 'th')", name="ck_articles_language"),
        sa.CheckConstraint("view_count >= 0", name="ck_articles_view_count"),
    )
    op.create_index("ix_articles_author_id", "articles", ["author_id"])
    # Public listing: WHERE status = 'published' ORDER BY published_at DESC
    op.create_index(
        "idx_articles_status_published_at",
        "articles",
        ["status", sa.text("published_at DESC")],
    )

    # ── author_applications ───────────────────────────────────────────────
    op.create_table(
        "author_applications",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("bio", sa.Text(), nullable=False),
        sa.Column("credentials", sa.Text(), nullable=False),
        sa.Column("writing_samples", sa.Text(), nullable=True),
        sa.Column("motivation", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("reviewed_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("reviewed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.user_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["reviewed_by"], ["user_profiles.user_id"], ondelete="SET NULL"
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_author_applications_status",
        ),
    )
    op.create_index(
        "idx_author_applications_status_created_at",
        "author_applications",
        ["status", "created_at"],
    )

    # ── reading_history ───────────────────────────────────────────────────
    op.create_table(
        "reading_history",
        _uuid_pk(),
        sa.Column("article_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "scroll_percentage", sa.Integer(), nullable=False, server_default=sa.text("0")
        ),
        sa.Column(
            "time_spent_seconds", sa.Integer(), nullable=False, server_default=sa.text("0")
        ),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "completion_percentage", sa.Integer(), nullable=False, server_default=sa.text("0")
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["article_id"], ["articles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.user_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("article_id", "user_id", name="uq_reading_history_article_user"),
        sa.CheckConstraint(
            "scroll_percentage BETWEEN 0 AND 100", name="ck_reading_history_scroll"
        ),
        sa.CheckConstraint(
            "completion_percentage BETWEEN 0 AND 100", name="ck_reading_history_completion"
        ),
        sa.CheckConstraint("time_spent_seconds >= 0", name="ck_reading_history_time"),
    )
    op.create_index(
        "idx_reading_history_user_updated_at", "reading_history", ["user_id", "updated_at"]
    )

    # ── audit trail ───────────────────────────────────────────────────────
    op.create_table(
        "audit_logs",
        _uuid_pk(),
        sa.Column("action", sa.String(100), nullable=False, comment="e.g. article_rejected"),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("actor_role", sa.String(20), nullable=True),
        sa.Column(
            "details",
            postgresql.JSON(),
            nullable=False,
            server_default=sa.text("'{}'::json"),
        ),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["actor_id"], ["user_profiles.user_id"], ondelete="SET NULL"),
    )
    op.create_index("idx_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])
    op.create_index("idx_audit_logs_created_at", "audit_logs", [sa.text("created_at DESC")])

    op.create_table(
        "role_change_logs",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("old_role", sa.String(20), nullable=False),
        sa.Column("new_role", sa.String(20), nullable=False),
        sa.Column("changed_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["user_profiles.user_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["changed_by"], ["user_profiles.user_id"], ondelete="SET NULL"
        ),
    )
    op.create_index("ix_role_change_logs_user_id", "role_change_logs", ["user_id"])


def downgrade() -> None:
    """Drop every table in reverse dependency order. Destructive."""
    op.drop_index("ix_role_change_logs_user_id", table_name="role_change_logs")
    op.drop_table("role_change_logs")
    op.drop_index("idx_audit_logs_created_at", table_name="audit_logs")
    op.drop_index("idx_audit_logs_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("idx_reading_history_user_updated_at", table_name="reading_history")
    op.drop_table("reading_history")
    op.drop_index("idx_author_applications_status_created_at", table_name="author_applications")
    op.drop_table("author_applications")
    op.drop_index("idx_articles_status_published_at", table_name="articles")
    op.drop_index("ix_articles_author_id", table_name="articles")
    op.drop_table("articles")
    op.drop_table("user_profiles")
