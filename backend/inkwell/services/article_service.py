"""
Inkwell Backend — Article Service
==================================

What:  Public article listing and detail, reading-time estimation, draft
       authoring, the author's own article list and the "submit for
       review" transition.
Who:   Called by routes/articles.py and routes/seo.py.

Visibility rules:
    - Soft-deleted articles (deleted_at set) never appear and read as 404.
    - Anonymous callers, readers and authors may only list `published`.
      Any other status filter requires the admin role.

Authoring rules:
    - Authors and admins create drafts; only the owner edits one, and only
      while it is still `draft` (guarded on status like every transition).
    - The slug comes from the title unless given and is unique per language.
"""

import logging
import math
import re
import uuid
from typing import List, Optional, Tuple, Type, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth import is_admin
from inkwell.config import settings
from inkwell.exceptions import (
    ConflictError,
    DatabaseError,
    InkwellError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from inkwell.models.article import Article, ArticleStatus
from inkwell.models.user_profile import UserProfile
from inkwell.schemas.article import ArticleDraft, ArticleSummary
from inkwell.services.audit_service import audit_service
from inkwell.services.workflow import ensure_article_transition, guarded_update

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
# Thai is written without spaces between words
THAI_CHARS_PER_WORD = 5

_THAI_CHAR = re.compile(r"[\u0E00-\u0E7F]")
_MARKUP_TAG = re.compile(r"<[^>]+>")

_SLUG_SEPARATORS = re.compile(r"[\s_]+")
_SLUG_DISALLOWED = re.compile(r"[^\u0E00-\u0E7Fa-z0-9-]")
_SLUG_DASHES = re.compile(r"-+")
SLUG_MAX_LENGTH = 100

OWN_SORT_FIELDS = {
    "updated_at": Article.updated_at,
    "created_at": Article.created_at,
    "published_at": Article.published_at,
    "view_count": Article.view_count,
}

S = TypeVar("S", bound=ArticleSummary)


def estimate_reading_time(content: Optional[str]) -> int:
    """
    Minutes needed to read `content` at 200 words per minute, rounded up,
    never less than 1. Thai characters count as 1/5 of a word each.
    """
    text = _MARKUP_TAG.sub(" ", content or "")
    thai_chars = len(_THAI_CHAR.findall(text))
    other_words = len(_THAI_CHAR.sub(" ", text).split())
    words = other_words + thai_chars / THAI_CHARS_PER_WORD
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def generate_slug(text: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """
    URL-friendly slug keeping Thai letters, e.g.
    "Building Mindfulness Through Practice" → "building-mindfulness-through-practice".
    """
    slug = _SLUG_SEPARATORS.sub("-", text.strip().lower())
    slug = _SLUG_DISALLOWED.sub("", slug)
    slug = _SLUG_DASHES.sub("-", slug).strip("-")
    return slug[:max_length].rstrip("-")


def serialize_article(article: Article, schema: Type[S]) -> S:
    """Build a response model, deriving reading time when it is not stored."""
    data = schema.model_validate(article)
    if data.reading_time_minutes is None:
        data.reading_time_minutes = estimate_reading_time(article.content)
    return data


def cache_control_for(status: str, max_age: int) -> str:
    """Published listings are shared-cacheable; everything else is not."""
    if status == ArticleStatus.PUBLISHED.value:
        return f"public, s-maxage={max_age}, stale-while-revalidate={max_age * 2}"
    return "no-store"


class ArticleService:
    async def list_articles(
        self,
        db: AsyncSession,
        viewer: Optional[UserProfile],
        status: str = ArticleStatus.PUBLISHED.value,
        limit: int = 10,
        offset: int = 0,
        category: Optional[str] = None,
        language: Optional[str] = None,
    ) -> Tuple[List[Article], int]:
        """
        List non-deleted articles, most recently published first.

        Returns:
            (page of articles, total matching the filters)

        Raises:
            ValidationError: unknown status value
            PermissionDeniedError: non-published status without admin role
        """
        valid = {s.value for s in ArticleStatus}
        if status not in valid:
            raise ValidationError(
                message=f"Invalid status '{status}'",
                field="status",
                context={"allowed": sorted(valid)},
            )
        if status != ArticleStatus.PUBLISHED.value and not is_admin(viewer):
            raise PermissionDeniedError(
                message="Only administrators can list unpublished articles",
                context={"status": status},
            )

        filters = [Article.status == status, Article.deleted_at.is_(None)]
        if category:
            filters.append(Article.category == category)
        if language:
            filters.append(Article.language == language)

        try:
            total = await db.scalar(select(func.count(Article.id)).where(*filters)) or 0
            result = await db.execute(
                select(Article)
                .where(*filters)
                .order_by(Article.published_at.desc().nulls_last(), Article.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing articles: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve articles. Please try again.")
        return list(result.scalars().all()), total

    async def get_published_by_slug(
        self,
        db: AsyncSession,
        slug: str,
        language: Optional[str] = None,
        count_view: bool = True,
    ) -> Article:
        """
        Fetch a published article by slug and (optionally) count the view.

        Without a language the most recently published version wins.
        """
        query = select(Article).where(
            Article.slug == slug,
            Article.status == ArticleStatus.PUBLISHED.value,
            Article.deleted_at.is_(None),
        )
        if language:
            query = query.where(Article.language == language)
        query = query.order_by(Article.published_at.desc().nulls_last()).limit(1)

        try:
            article = (await db.execute(query)).scalar_one_or_none()
            if article is None:
                raise NotFoundError(resource="article", resource_id=slug)

            if count_view:
                # updated_at is pinned so a page view does not look like an edit
                await db.execute(
                    update(Article)
                    .where(Article.id == article.id)
                    .values(view_count=Article.view_count + 1, updated_at=Article.updated_at)
                    .execution_options(synchronize_session=False)
                )
                await db.refresh(article)
            return article
        except InkwellError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching article %s: %s", slug, e, exc_info=True)
            raise DatabaseError(message="Could not retrieve the article. Please try again.")

    async def get_article(self, db: AsyncSession, article_id: uuid.UUID) -> Article:
        """Any non-deleted article by id; 404 otherwise."""
        try:
            result = await db.execute(
                select(Article).where(Article.id == article_id, Article.deleted_at.is_(None))
            )
        except SQLAlchemyError as e:
            logger.error("Database error fetching article %s: %s", article_id, e, exc_info=True)
            raise DatabaseError(context={"article_id": str(article_id)})
        article = result.scalar_one_or_none()
        if article is None:
            raise NotFoundError(resource="article", resource_id=str(article_id))
        return article

    async def submit_for_review(
        self,
        db: AsyncSession,
        article_id: uuid.UUID,
        actor: UserProfile,
    ) -> Article:
        """
        draft → pending_approval, by the owning author or an admin.

        Raises:
            NotFoundError, PermissionDeniedError, InvalidTransitionError
        """
        article = await self.get_article(db, article_id)
        if article.author_id != actor.user_id and not is_admin(actor):
            raise PermissionDeniedError(
                message="You can only submit your own articles",
                context={"article_id": str(article_id)},
            )

        target = ArticleStatus.PENDING_APPROVAL.value
        action = ensure_article_transition(article.status, target)
        previous = article.status

        try:
            applied = await guarded_update(
                db, Article, article.id, previous, {"status": target},
                Article.deleted_at.is_(None),
            )
            if not applied:
                raise InvalidTransitionError(
                    message="Article status changed while submitting; reload and try again",
                    entity_type="article",
                    target_status=target,
                    required_status=previous,
                )
            await db.refresh(article)
        except InkwellError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error submitting article %s: %s", article_id, e, exc_info=True)
            raise DatabaseError(context={"article_id": str(article_id)})

        await audit_service.record(
            db,
            action=action,
            entity_type="article",
            entity_id=article.id,
            actor=actor,
            details={
                "article_title": article.title,
                "previous_status": previous,
                "new_status": target,
            },
        )
        logger.info("Article %s submitted for review by %s", article.id, actor.user_id)
        return article

    # ── Authoring ─────────────────────────────────────────────────────────

    async def save_draft(
        self,
        db: AsyncSession,
        author: UserProfile,
        payload: ArticleDraft,
    ) -> Tuple[Article, bool]:
        """
        Create a new draft, or update one of the caller's drafts when
        `payload.id` is set. Returns (article, created).

        Raises:
            ValidationError: title yields an empty slug
            NotFoundError: `payload.id` is unknown or deleted
            PermissionDeniedError: the draft belongs to someone else
            ConflictError: article is no longer a draft (NOT_A_DRAFT), or the
                slug is taken in that language (SLUG_TAKEN)
        """
        slug = generate_slug(payload.slug or payload.title)
        if not slug:
            raise ValidationError(
                message="Could not derive a slug from the title; provide one",
                field="slug",
            )

        values = {
            "title": payload.title,
            "slug": slug,
            "content": payload.content,
            "excerpt": payload.excerpt,
            "category": payload.category,
            "featured_image_url": payload.featured_image_url,
            "seo_title": payload.seo_title,
            "seo_description": payload.seo_description,
            "seo_keywords": payload.seo_keywords,
            "reading_time_minutes": estimate_reading_time(payload.content),
        }

        if payload.id is None:
            return await self._create_draft(db, author, payload, values), True
        return await self._update_draft(db, author, payload, values), False

    async def _create_draft(
        self, db: AsyncSession, author: UserProfile, payload: ArticleDraft, values: dict
    ) -> Article:
        language = payload.language or settings.default_locale
        await self._ensure_slug_free(db, values["slug"], language)

        article = Article(
            id=uuid.uuid4(),
            author_id=author.user_id,
            status=ArticleStatus.DRAFT.value,
            language=language,
            **values,
        )
        try:
            db.add(article)
            await db.flush()
        except IntegrityError:
            logger.warning("Slug '%s' (%s) taken during draft creation", values["slug"], language)
            raise _slug_taken(values["slug"], language)
        except SQLAlchemyError as e:
            logger.error("Database error creating draft: %s", e, exc_info=True)
            raise DatabaseError(message="Failed to create article")

        logger.info("Draft %s created by %s", article.id, author.user_id)
        return article

    async def _update_draft(
        self, db: AsyncSession, author: UserProfile, payload: ArticleDraft, values: dict
    ) -> Article:
        article = await self.get_article(db, payload.id)
        if article.author_id != author.user_id:
            raise PermissionDeniedError(
                message="You can only edit your own articles",
                context={"article_id": str(article.id)},
            )
        if article.status != ArticleStatus.DRAFT.value:
            raise _not_a_draft(article.id, article.status)

        language = payload.language or article.language
        await self._ensure_slug_free(db, values["slug"], language, exclude_id=article.id)

        try:
            applied = await guarded_update(
                db, Article, article.id, ArticleStatus.DRAFT.value,
                {**values, "language": language},
                Article.deleted_at.is_(None),
            )
            if not applied:
                raise _not_a_draft(article.id)
            await db.refresh(article)
        except InkwellError:
            raise
        except IntegrityError:
            raise _slug_taken(values["slug"], language)
        except SQLAlchemyError as e:
            logger.error("Database error updating draft %s: %s", article.id, e, exc_info=True)
            raise DatabaseError(message="Failed to update article")

        logger.info("Draft %s updated by %s", article.id, author.user_id)
        return article

    async def _ensure_slug_free(
        self,
        db: AsyncSession,
        slug: str,
        language: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Article.id).where(Article.slug == slug, Article.language == language)
        if exclude_id is not None:
            query = query.where(Article.id != exclude_id)
        try:
            taken = await db.scalar(query.limit(1))
        except SQLAlchemyError as e:
            logger.error("Database error checking slug %s: %s", slug, e, exc_info=True)
            raise DatabaseError()
        if taken is not None:
            raise _slug_taken(slug, language)

    async def list_own(
        self,
        db: AsyncSession,
        author: UserProfile,
        status: Optional[str] = None,
        sort: str = "updated_at",
        order: str = "desc",
    ) -> List[Article]:
        """The caller's non-deleted articles in any status."""
        filters = [Article.author_id == author.user_id, Article.deleted_at.is_(None)]
        if status is not None:
            valid = {s.value for s in ArticleStatus}
            if status not in valid:
                raise ValidationError(
                    message=f"Invalid status '{status}'",
                    field="status",
                    context={"allowed": sorted(valid)},
                )
            filters.append(Article.status == status)

        column = OWN_SORT_FIELDS.get(sort, Article.updated_at)
        ordering = column.asc().nulls_last() if order == "asc" else column.desc().nulls_last()

        try:
            result = await db.execute(
                select(Article).where(*filters).order_by(ordering, Article.created_at.desc())
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing articles of %s: %s",
                         author.user_id, e, exc_info=True)
            raise DatabaseError(message="Could not retrieve your articles. Please try again.")
        return list(result.scalars().all())


def _slug_taken(slug: str, language: str) -> ConflictError:
    return ConflictError(
        message="An article with this slug already exists",
        code="SLUG_TAKEN",
        context={"slug": slug, "language": language},
    )


def _not_a_draft(article_id: uuid.UUID, current_status: Optional[str] = None) -> ConflictError:
    context = {"article_id": str(article_id)}
    if current_status is not None:
        context["current_status"] = current_status
    return ConflictError(
        message="Only draft articles can be edited",
        code="NOT_A_DRAFT",
        context=context,
    )


article_service = ArticleService()
