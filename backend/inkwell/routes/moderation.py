"""
Inkwell Backend — Admin Moderation Routes
==========================================

What:  Review queue and approve / reject / unpublish actions.
Who:   Admin dashboard. Every endpoint requires the admin role.

Endpoints:
    GET  /api/admin/moderation/pending
    GET  /api/admin/moderation/published
    POST /api/admin/moderation/{article_id}/approve
    POST /api/admin/moderation/{article_id}/reject      body {reason?}
    POST /api/admin/moderation/{article_id}/unpublish   body {reason?}
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth import require_admin
from inkwell.database import get_db_session
from inkwell.models.article import Article
from inkwell.models.user_profile import UserProfile
from inkwell.routes.deps import resolve_locale
from inkwell.schemas.article import (
    ArticleResponse,
    ModerationReason,
    ModerationResult,
    PendingArticlesResponse,
    PublishedArticlesResponse,
)
from inkwell.schemas.common import ApiResponse, ErrorResponse
from inkwell.services.article_service import serialize_article
from inkwell.services.i18n import translate
from inkwell.services.moderation_service import moderation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/moderation", tags=["Moderation"])

TRANSITION_RESPONSES = {
    401: {"description": "Not authenticated", "model": ErrorResponse},
    403: {"description": "Not an admin", "model": ErrorResponse},
    404: {"description": "Article not found", "model": ErrorResponse},
    409: {"description": "Article is in the wrong state", "model": ErrorResponse},
}


def _result(
    article: Article, key: str, request: Request, admin: UserProfile, lang: Optional[str]
) -> ApiResponse[ModerationResult]:
    return ApiResponse(
        data=ModerationResult(
            article=serialize_article(article, ArticleResponse),
            message=translate(key, resolve_locale(request, admin, lang)),
        )
    )


@router.get(
    "/pending",
    response_model=ApiResponse[PendingArticlesResponse],
    summary="Articles awaiting approval",
)
async def list_pending(
    response: Response,
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PendingArticlesResponse]:
    articles = await moderation_service.list_pending(db)
    response.headers["Cache-Control"] = "no-store"
    return ApiResponse(data=PendingArticlesResponse(articles=articles, count=len(articles)))


@router.get(
    "/published",
    response_model=ApiResponse[PublishedArticlesResponse],
    summary="Published articles (for unpublishing)",
)
async def list_published(
    response: Response,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PublishedArticlesResponse]:
    articles, total = await moderation_service.list_published(db, limit=limit, offset=offset)
    response.headers["Cache-Control"] = "no-store"
    return ApiResponse(
        data=PublishedArticlesResponse(articles=articles, total=total, limit=limit, offset=offset)
    )


@router.post(
    "/{article_id}/approve",
    response_model=ApiResponse[ModerationResult],
    responses=TRANSITION_RESPONSES,
    summary="Approve and publish a pending article",
)
async def approve_article(
    article_id: uuid.UUID,
    request: Request,
    lang: Optional[str] = Query(default=None),
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ModerationResult]:
    article = await moderation_service.approve(db, article_id, admin)
    return _result(article, "article.approved", request, admin, lang)


@router.post(
    "/{article_id}/reject",
    response_model=ApiResponse[ModerationResult],
    responses=TRANSITION_RESPONSES,
    summary="Reject a pending article back to draft",
)
async def reject_article(
    article_id: uuid.UUID,
    request: Request,
    body: Optional[ModerationReason] = Body(default=None),
    lang: Optional[str] = Query(default=None),
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ModerationResult]:
    reason = body.reason if body else None
    article = await moderation_service.reject(db, article_id, admin, reason=reason)
    return _result(article, "article.rejected", request, admin, lang)


@router.post(
    "/{article_id}/unpublish",
    response_model=ApiResponse[ModerationResult],
    responses=TRANSITION_RESPONSES,
    summary="Unpublish (archive) a published article",
)
async def unpublish_article(
    article_id: uuid.UUID,
    request: Request,
    body: Optional[ModerationReason] = Body(default=None),
    lang: Optional[str] = Query(default=None),
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ModerationResult]:
    reason = body.reason if body else None
    article = await moderation_service.unpublish(db, article_id, admin, reason=reason)
    return _result(article, "article.unpublished", request, admin, lang)
