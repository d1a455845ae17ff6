"""
Inkwell Backend — Moderation Service (admin)
=============================================

What:  Admin review queue and the three admin article transitions.
Who:   Called by routes/moderation.py (all endpoints require the admin role).

Transition flow (approve / reject / unpublish):
    ┌────────────┐    ┌─────────────────┐    ┌───────────────┐    ┌─────────┐
    │ Load       │───▶│ Check table     │───▶│ Guarded       │───▶│ Audit   │
    │ (404 if    │    │ (409 if wrong   │    │ UPDATE        │    │ entry   │
    │  deleted)  │    │  state)         │    │ (409 on race) │    │         │
    └────────────┘    └─────────────────┘    └───────────────┘    └─────────┘

    A failed check leaves the article unchanged and writes no audit entry.
    The update and the audit entry share the request's transaction.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.exceptions import (
    DatabaseError,
    InkwellError,
    InvalidTransitionError,
    NotFoundError,
)
from inkwell.models.article import Article, ArticleStatus
from inkwell.models.base import utc_now
from inkwell.models.user_profile import UserProfile
from inkwell.schemas.article import AuthorSummary, PendingArticle
from inkwell.services.article_service import serialize_article
from inkwell.services.audit_service import audit_service
from inkwell.services.workflow import ensure_article_transition, guarded_update

logger = logging.getLogger(__name__)

DEFAULT_REASON = "No reason provided"


def _with_author(article: Article, author: Optional[UserProfile]) -> PendingArticle:
    item = serialize_article(article, PendingArticle)
    if author is not None:
        item.author = AuthorSummary(
            id=author.user_id,
            username=author.username,
            full_name=author.full_name,
            avatar_url=author.avatar_url,
        )
    return item


class ModerationService:
    # ── Queues ────────────────────────────────────────────────────────────

    async def list_pending(self, db: AsyncSession) -> List[PendingArticle]:
        """Articles awaiting approval, newest submission first."""
        try:
            result = await db.execute(
                select(Article, UserProfile)
                .outerjoin(UserProfile, UserProfile.user_id == Article.author_id)
                .where(
                    Article.status == ArticleStatus.PENDING_APPROVAL.value,
                    Article.deleted_at.is_(None),
                )
                .order_by(Article.created_at.desc())
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing pending articles: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve pending articles. Please try again.")
        return [_with_author(article, author) for article, author in result.all()]

    async def list_published(
        self,
        db: AsyncSession,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[PendingArticle], int]:
        """Published articles, most recently published first."""
        filters = [
            Article.status == ArticleStatus.PUBLISHED.value,
            Article.deleted_at.is_(None),
        ]
        try:
            total = await db.scalar(select(func.count(Article.id)).where(*filters)) or 0
            result = await db.execute(
                select(Article, UserProfile)
                .outerjoin(UserProfile, UserProfile.user_id == Article.author_id)
                .where(*filters)
                .order_by(Article.published_at.desc().nulls_last())
                .limit(limit)
                .offset(offset)
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing published articles: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve published articles. Please try again.")
        return [_with_author(article, author) for article, author in result.all()], total

    # ── Transitions ───────────────────────────────────────────────────────

    async def approve(
        self, db: AsyncSession, article_id: uuid.UUID, admin: UserProfile
    ) -> Article:
        """pending_approval → published; stamps published_at."""
        return await self._transition(
            db,
            article_id,
            admin,
            target=ArticleStatus.PUBLISHED.value,
            values={"published_at": utc_now()},
        )

    async def reject(
        self,
        db: AsyncSession,
        article_id: uuid.UUID,
        admin: UserProfile,
        reason: Optional[str] = None,
    ) -> Article:
        """pending_approval → draft, so the author can revise and resubmit."""
        return await self._transition(
            db,
            article_id,
            admin,
            target=ArticleStatus.DRAFT.value,
            details={"rejection_reason": reason or DEFAULT_REASON},
        )

    async def unpublish(
        self,
        db: AsyncSession,
        article_id: uuid.UUID,
        admin: UserProfile,
        reason: Optional[str] = None,
    ) -> Article:
        """published → archived; the former published_at is kept in the audit entry."""
        return await self._transition(
            db,
            article_id,
            admin,
            target=ArticleStatus.ARCHIVED.value,
            details={"unpublish_reason": reason or DEFAULT_REASON},
            record_published_at=True,
        )

    async def _transition(
        self,
        db: AsyncSession,
        article_id: uuid.UUID,
        admin: UserProfile,
        target: str,
        values: Optional[Dict[str, Any]] = None,
        details: Optional[Dict[str, Any]] = None,
        record_published_at: bool = False,
    ) -> Article:
        try:
            article = (
                await db.execute(
                    select(Article).where(
                        Article.id == article_id, Article.deleted_at.is_(None)
                    )
                )
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error loading article %s: %s", article_id, e, exc_info=True)
            raise DatabaseError(context={"article_id": str(article_id)})
        if article is None:
            raise NotFoundError(resource="article", resource_id=str(article_id))

        # Raises InvalidTransitionError before anything is written
        action = ensure_article_transition(article.status, target)
        previous = article.status
        was_published_at = article.published_at

        try:
            applied = await guarded_update(
                db,
                Article,
                article.id,
                previous,
                {"status": target, **(values or {})},
                Article.deleted_at.is_(None),
            )
            if not applied:
                raise InvalidTransitionError(
                    message="Article was modified by another request; reload and try again",
                    entity_type="article",
                    target_status=target,
                    required_status=previous,
                )
            await db.refresh(article)
        except InkwellError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error during %s of %s: %s", action, article_id, e, exc_info=True)
            raise DatabaseError(context={"article_id": str(article_id), "action": action})

        audit_details: Dict[str, Any] = {
            "article_title": article.title,
            "previous_status": previous,
            "new_status": target,
            **(details or {}),
        }
        if record_published_at:
            audit_details["was_published_at"] = (
                was_published_at.isoformat() if was_published_at else None
            )

        await audit_service.record(
            db,
            action=action,
            entity_type="article",
            entity_id=article.id,
            actor=admin,
            details=audit_details,
        )
        logger.info("Article %s: %s → %s by admin %s", article.id, previous, target, admin.user_id)
        return article


moderation_service = ModerationService()
