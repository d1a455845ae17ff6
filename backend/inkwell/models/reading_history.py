"""
Inkwell Backend — ReadingHistory Model
=======================================

What:  A reader's progress through one article.
How:   Exactly one row per (article, user); progress updates are merged into
       it (see ReadingHistoryService.record_progress).
"""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.database import Base
from inkwell.models.base import TimestampMixin


class ReadingHistory(TimestampMixin, Base):
    __tablename__ = "reading_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("user_profiles.user_id", ondelete="CASCADE"), nullable=False
    )

    scroll_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    time_spent_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completion_percentage: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    __table_args__ = (
        UniqueConstraint("article_id", "user_id", name="uq_reading_history_article_user"),
        CheckConstraint(
            "scroll_percentage BETWEEN 0 AND 100", name="ck_reading_history_scroll"
        ),
        CheckConstraint(
            "completion_percentage BETWEEN 0 AND 100",
            name="ck_reading_history_completion",
        ),
        CheckConstraint("time_spent_seconds >= 0", name="ck_reading_history_time"),
        Index("idx_reading_history_user_updated_at", "user_id", "updated_at"),
    )
