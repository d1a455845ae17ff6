"""
Inkwell Backend — Reading History Service
==========================================

What:  Tracks how far each reader got through each article.
How:   One row per (article, user). New progress is merged into the row:

           scroll_percentage     = max(old, new)
           completion_percentage = max(old, new)
           time_spent_seconds    = old + new       (capped at INT max)
           completed             = old or new      (sticky once true)

       so out-of-order or repeated beacons from the browser can only move
       progress forward. The merge runs inside a single
       INSERT ... ON CONFLICT DO UPDATE, so two first beacons racing for
       the same (article, user) both merge into one row.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import case, delete, func, or_, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
)
from inkwell.models.article import Article, ArticleStatus
from inkwell.models.base import utc_now
from inkwell.models.reading_history import ReadingHistory
from inkwell.models.user_profile import UserProfile
from inkwell.schemas.reading_history import (
    HistoryArticle,
    ReadingHistoryItem,
    ReadingProgress,
)
from inkwell.services.article_service import estimate_reading_time

logger = logging.getLogger(__name__)

# Upper bound of the INTEGER column
MAX_TIME_SPENT_SECONDS = 2_147_483_647


def _greatest(current, incoming):
    return case((incoming > current, incoming), else_=current)


class ReadingHistoryService:
    async def record_progress(
        self,
        db: AsyncSession,
        article_id: uuid.UUID,
        user: UserProfile,
        progress: ReadingProgress,
    ) -> ReadingHistory:
        """
        Create or merge the caller's entry for an article.

        Raises:
            NotFoundError: article does not exist (or is deleted)
            PermissionDeniedError: article is not published
        """
        try:
            article = (
                await db.execute(
                    select(Article).where(Article.id == article_id, Article.deleted_at.is_(None))
                )
            ).scalar_one_or_none()
            if article is None:
                raise NotFoundError(resource="article", resource_id=str(article_id))
            if article.status != ArticleStatus.PUBLISHED.value:
                raise PermissionDeniedError(
                    message="Article is not published",
                    context={"article_id": str(article_id)},
                )

            statement = self._upsert_statement(db, article_id, user.user_id, progress)
            await db.execute(statement)
            entry = (
                await db.execute(
                    select(ReadingHistory)
                    .where(
                        ReadingHistory.article_id == article_id,
                        ReadingHistory.user_id == user.user_id,
                    )
                    .execution_options(populate_existing=True)
                )
            ).scalar_one()
        except (NotFoundError, PermissionDeniedError):
            raise
        except SQLAlchemyError as e:
            logger.error("Failed to record reading progress for %s on %s: %s",
                         user.user_id, article_id, e, exc_info=True)
            raise DatabaseError(message="Failed to update reading history")
        return entry

    def _upsert_statement(
        self,
        db: AsyncSession,
        article_id: uuid.UUID,
        user_id: uuid.UUID,
        progress: ReadingProgress,
    ):
        """
        INSERT ... ON CONFLICT (article_id, user_id) DO UPDATE with the merge
        rules applied in SQL, so concurrent first beacons both land.
        """
        dialect = db.get_bind().dialect.name
        insert = postgresql_insert if dialect == "postgresql" else sqlite_insert
        now = utc_now()
        stmt = insert(ReadingHistory).values(
            id=uuid.uuid4(),
            article_id=article_id,
            user_id=user_id,
            scroll_percentage=progress.scroll_percentage,
            time_spent_seconds=progress.time_spent_seconds,
            completed=progress.completed,
            completion_percentage=progress.completion_percentage,
            created_at=now,
            updated_at=now,
        )
        new = stmt.excluded
        total_time = ReadingHistory.time_spent_seconds + new.time_spent_seconds
        return stmt.on_conflict_do_update(
            index_elements=["article_id", "user_id"],
            set_={
                "scroll_percentage": _greatest(
                    ReadingHistory.scroll_percentage, new.scroll_percentage
                ),
                "completion_percentage": _greatest(
                    ReadingHistory.completion_percentage, new.completion_percentage
                ),
                "time_spent_seconds": case(
                    (total_time > MAX_TIME_SPENT_SECONDS, MAX_TIME_SPENT_SECONDS),
                    else_=total_time,
                ),
                "completed": or_(ReadingHistory.completed, new.completed),
                "updated_at": now,
            },
        )

    async def get_entry(
        self, db: AsyncSession, article_id: uuid.UUID, user: UserProfile
    ) -> Optional[ReadingHistory]:
        result = await db.execute(
            select(ReadingHistory).where(
                ReadingHistory.article_id == article_id,
                ReadingHistory.user_id == user.user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_history(
        self,
        db: AsyncSession,
        user: UserProfile,
        page: int = 1,
        limit: int = 20,
        completed: Optional[bool] = None,
    ) -> Tuple[List[ReadingHistoryItem], int]:
        """The caller's entries, most recently updated first, with article summaries."""
        filters = [ReadingHistory.user_id == user.user_id]
        if completed is not None:
            filters.append(ReadingHistory.completed == completed)

        try:
            total = await db.scalar(select(func.count(ReadingHistory.id)).where(*filters)) or 0
            result = await db.execute(
                select(ReadingHistory, Article)
                .outerjoin(Article, Article.id == ReadingHistory.article_id)
                .where(*filters)
                .order_by(ReadingHistory.updated_at.desc())
                .limit(limit)
                .offset((page - 1) * limit)
            )
        except SQLAlchemyError as e:
            logger.error("Failed to list reading history for %s: %s", user.user_id, e, exc_info=True)
            raise DatabaseError(message="Failed to fetch reading history")

        items = []
        for entry, article in result.all():
            item = ReadingHistoryItem.model_validate(entry)
            if article is not None:
                item.article = HistoryArticle.model_validate(article)
                if item.article.reading_time_minutes is None:
                    item.article.reading_time_minutes = estimate_reading_time(article.content)
            items.append(item)
        return items, total

    async def delete_entry(
        self, db: AsyncSession, article_id: uuid.UUID, user: UserProfile
    ) -> None:
        """Remove the caller's entry for an article; absent entries are not an error."""
        try:
            await db.execute(
                delete(ReadingHistory).where(
                    ReadingHistory.article_id == article_id,
                    ReadingHistory.user_id == user.user_id,
                )
            )
        except SQLAlchemyError as e:
            logger.error("Failed to delete reading history for %s: %s", user.user_id, e, exc_info=True)
            raise DatabaseError(message="Failed to delete reading history")
        logger.info("Reading history for article %s cleared by %s", article_id, user.user_id)


reading_history_service = ReadingHistoryService()
