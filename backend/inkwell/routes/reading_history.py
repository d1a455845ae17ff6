"""
Inkwell Backend — Reading History Routes
=========================================

POST   /api/articles/{article_id}/reading-history   record progress (merged)
GET    /api/articles/{article_id}/reading-history   the caller's entry or null
GET    /api/reading-history                         paginated list
DELETE /api/reading-history                         body {article_id}
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth import get_current_user
from inkwell.database import get_db_session
from inkwell.models.user_profile import UserProfile
from inkwell.routes.deps import resolve_locale
from inkwell.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from inkwell.schemas.reading_history import (
    ReadingHistoryDelete,
    ReadingHistoryPage,
    ReadingHistoryResponse,
    ReadingProgress,
)
from inkwell.services.i18n import translate
from inkwell.services.reading_history_service import reading_history_service

router = APIRouter(prefix="/api", tags=["Reading History"])


@router.post(
    "/articles/{article_id}/reading-history",
    response_model=ApiResponse[ReadingHistoryResponse],
    responses={
        403: {"description": "Article is not published", "model": ErrorResponse},
        404: {"description": "Article not found", "model": ErrorResponse},
    },
)
async def record_progress(
    article_id: uuid.UUID,
    progress: ReadingProgress,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ReadingHistoryResponse]:
    entry = await reading_history_service.record_progress(db, article_id, user, progress)
    return ApiResponse(data=ReadingHistoryResponse.model_validate(entry))


@router.get(
    "/articles/{article_id}/reading-history",
    response_model=ApiResponse[Optional[ReadingHistoryResponse]],
)
async def get_progress(
    article_id: uuid.UUID,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Optional[ReadingHistoryResponse]]:
    entry = await reading_history_service.get_entry(db, article_id, user)
    return ApiResponse(
        data=ReadingHistoryResponse.model_validate(entry) if entry else None
    )


@router.get("/reading-history", response_model=ApiResponse[ReadingHistoryPage])
async def list_history(
    response: Response,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    completed: Optional[bool] = Query(default=None),
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ReadingHistoryPage]:
    items, total = await reading_history_service.list_history(
        db, user, page=page, limit=limit, completed=completed
    )
    response.headers["Cache-Control"] = "private, no-store"
    return ApiResponse(data=ReadingHistoryPage(history=items, total=total, page=page, limit=limit))


@router.delete("/reading-history", response_model=ApiResponse[MessageResponse])
async def delete_history(
    body: ReadingHistoryDelete,
    request: Request,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[MessageResponse]:
    await reading_history_service.delete_entry(db, body.article_id, user)
    message = translate("reading_history.deleted", resolve_locale(request, user))
    return ApiResponse(data=MessageResponse(message=message))
