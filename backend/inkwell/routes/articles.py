"""
Inkwell Backend — Article Route Handlers
=========================================

What:  GET /api/articles, GET /api/articles/{slug},
       POST /api/articles/draft, GET /api/author/articles,
       POST /api/articles/{article_id}/submit
How:   Extracts query parameters, delegates to ArticleService, wraps the
       result in the success envelope and sets caching headers.

Caching Strategy:
    - Published listings: shared cache (CDN) for PUBLIC_CACHE_MAX_AGE
      seconds, stale-while-revalidate for twice that
    - Any other listing (admin only): no-store
    - Drafts, the author's own list and submit: never cached
"""

import logging
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth import get_current_user, get_optional_user, require_author
from inkwell.config import settings
from inkwell.database import get_db_session
from inkwell.models.article import ArticleStatus
from inkwell.models.user_profile import UserProfile
from inkwell.routes.deps import resolve_locale
from inkwell.schemas.article import (
    ArticleDraft,
    ArticleListResponse,
    ArticleResponse,
    ArticleSummary,
    AuthorArticleListResponse,
    ModerationResult,
)
from inkwell.schemas.common import ApiResponse, ErrorResponse
from inkwell.services.article_service import (
    article_service,
    cache_control_for,
    serialize_article,
)
from inkwell.services.i18n import translate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Articles"])


@router.get(
    "/articles",
    response_model=ApiResponse[ArticleListResponse],
    responses={
        400: {"description": "Invalid filter", "model": ErrorResponse},
        403: {"description": "Non-published status without admin role", "model": ErrorResponse},
    },
    summary="List articles",
)
async def list_articles(
    response: Response,
    status: str = Query(default=ArticleStatus.PUBLISHED.value),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    category: Optional[str] = Query(default=None),
    language: Optional[str] = Query(default=None),
    viewer: Optional[UserProfile] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ArticleListResponse]:
    """
    Non-deleted articles ordered by published_at, newest first.

    Anonymous callers and non-admins only ever see `published`.
    """
    articles, total = await article_service.list_articles(
        db,
        viewer,
        status=status,
        limit=limit,
        offset=offset,
        category=category,
        language=language,
    )

    response.headers["Cache-Control"] = cache_control_for(status, settings.public_cache_max_age)
    response.headers["X-Total-Count"] = str(total)

    return ApiResponse(
        data=ArticleListResponse(
            articles=[serialize_article(a, ArticleSummary) for a in articles],
            total=total,
            limit=limit,
            offset=offset,
        )
    )


@router.get(
    "/articles/{slug}",
    response_model=ApiResponse[ArticleResponse],
    responses={404: {"description": "No published article with this slug", "model": ErrorResponse}},
    summary="Get a published article by slug",
)
async def get_article(
    slug: str,
    language: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ArticleResponse]:
    """Counts a view on every call."""
    article = await article_service.get_published_by_slug(db, slug, language=language)
    return ApiResponse(data=serialize_article(article, ArticleResponse))


@router.post(
    "/articles/{article_id}/submit",
    response_model=ApiResponse[ModerationResult],
    responses={
        403: {"description": "Not the article's author", "model": ErrorResponse},
        404: {"description": "Article not found", "model": ErrorResponse},
        409: {"description": "Article is not a draft", "model": ErrorResponse},
    },
    summary="Submit a draft for review",
)
async def submit_article(
    article_id: uuid.UUID,
    request: Request,
    response: Response,
    lang: Optional[str] = Query(default=None),
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ModerationResult]:
    article = await article_service.submit_for_review(db, article_id, user)
    response.headers["Cache-Control"] = "no-store"
    locale = resolve_locale(request, user, lang)
    return ApiResponse(
        data=ModerationResult(
            article=serialize_article(article, ArticleResponse),
            message=translate("article.submitted", locale),
        )
    )


@router.post(
    "/articles/draft",
    response_model=ApiResponse[ArticleResponse],
    status_code=http_status.HTTP_201_CREATED,
    responses={
        200: {"description": "Existing draft updated"},
        400: {"description": "Invalid fields", "model": ErrorResponse},
        403: {"description": "Not an author, or not the draft's owner", "model": ErrorResponse},
        404: {"description": "Draft not found", "model": ErrorResponse},
        409: {"description": "Not a draft any more, or slug taken", "model": ErrorResponse},
    },
    summary="Create or update a draft",
)
async def save_draft(
    payload: ArticleDraft,
    response: Response,
    user: UserProfile = Depends(require_author),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ArticleResponse]:
    """201 with the new draft, or 200 when `id` named an existing one."""
    article, created = await article_service.save_draft(db, user, payload)
    if not created:
        response.status_code = http_status.HTTP_200_OK
    response.headers["Cache-Control"] = "no-store"
    return ApiResponse(data=serialize_article(article, ArticleResponse))


@router.get(
    "/author/articles",
    response_model=ApiResponse[AuthorArticleListResponse],
    responses={403: {"description": "Not an author", "model": ErrorResponse}},
    summary="The caller's own articles in every status",
)
async def list_own_articles(
    response: Response,
    status: Optional[str] = Query(default=None),
    sort: str = Query(default="updated_at"),
    order: Literal["asc", "desc"] = Query(default="desc"),
    user: UserProfile = Depends(require_author),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthorArticleListResponse]:
    articles = await article_service.list_own(db, user, status=status, sort=sort, order=order)
    response.headers["Cache-Control"] = "no-store"
    return ApiResponse(
        data=AuthorArticleListResponse(
            articles=[serialize_article(a, ArticleSummary) for a in articles],
            count=len(articles),
        )
    )
