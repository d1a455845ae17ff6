"""
Inkwell Backend — Author Application Routes
============================================

Reader side:
    POST /api/author-application         submit (one per user)
    GET  /api/author-application         the caller's application or null

Admin side:
    GET  /api/admin/author-applications?status=pending|approved|rejected|all
    POST /api/admin/author-applications/{application_id}/review
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth import get_current_user, require_admin
from inkwell.database import get_db_session
from inkwell.models.author_application import ApplicationStatus
from inkwell.models.user_profile import UserProfile
from inkwell.routes.deps import resolve_locale
from inkwell.schemas.application import (
    ApplicationListResponse,
    ApplicationReview,
    AuthorApplicationCreate,
    AuthorApplicationResponse,
    ReviewResult,
)
from inkwell.schemas.common import ApiResponse, ErrorResponse
from inkwell.services.application_service import application_service
from inkwell.services.i18n import translate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Author Applications"])


@router.post(
    "/author-application",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[AuthorApplicationResponse],
    responses={
        400: {"description": "Field lengths out of range", "model": ErrorResponse},
        409: {"description": "Already applied or already an author", "model": ErrorResponse},
    },
    summary="Apply to become an author",
)
async def submit_application(
    payload: AuthorApplicationCreate,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthorApplicationResponse]:
    application = await application_service.submit(db, user, payload)
    return ApiResponse(data=AuthorApplicationResponse.model_validate(application))


@router.get(
    "/author-application",
    response_model=ApiResponse[Optional[AuthorApplicationResponse]],
    summary="The caller's author application",
)
async def get_my_application(
    response: Response,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Optional[AuthorApplicationResponse]]:
    application = await application_service.get_for_user(db, user)
    response.headers["Cache-Control"] = "private, no-store"
    return ApiResponse(
        data=AuthorApplicationResponse.model_validate(application) if application else None
    )


@router.get(
    "/admin/author-applications",
    response_model=ApiResponse[ApplicationListResponse],
    responses={400: {"description": "Unknown status filter", "model": ErrorResponse}},
    summary="List author applications (admin)",
)
async def list_applications(
    response: Response,
    status_filter: str = Query(default=ApplicationStatus.PENDING.value, alias="status"),
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ApplicationListResponse]:
    applications = await application_service.list_for_admin(db, status=status_filter)
    response.headers["Cache-Control"] = "no-store"
    return ApiResponse(
        data=ApplicationListResponse(applications=applications, count=len(applications))
    )


@router.post(
    "/admin/author-applications/{application_id}/review",
    response_model=ApiResponse[ReviewResult],
    responses={
        404: {"description": "Application not found", "model": ErrorResponse},
        409: {"description": "Application already reviewed", "model": ErrorResponse},
    },
    summary="Approve or reject an author application (admin)",
)
async def review_application(
    application_id: uuid.UUID,
    review: ApplicationReview,
    request: Request,
    lang: Optional[str] = Query(default=None),
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ReviewResult]:
    application = await application_service.review(
        db, application_id, admin, status=review.status, reason=review.reason
    )

    locale = resolve_locale(request, admin, lang)
    if review.status == ApplicationStatus.APPROVED.value:
        applicant = await db.get(UserProfile, application.user_id)
        name = (applicant.full_name or applicant.email) if applicant else ""
        message = translate("application.approved", locale, name=name)
    else:
        message = translate("application.rejected", locale)

    return ApiResponse(
        data=ReviewResult(application_id=application.id, status=application.status, message=message)
    )
