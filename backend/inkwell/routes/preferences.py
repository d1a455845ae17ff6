"""
Inkwell Backend — Reader Preferences Routes
============================================

GET   /api/preferences   current font size, language, accessibility mode, theme
PATCH /api/preferences   partial update; returns the columns that were written
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth import get_current_user
from inkwell.database import get_db_session
from inkwell.models.user_profile import UserProfile
from inkwell.schemas.common import ApiResponse, ErrorResponse
from inkwell.schemas.preferences import PreferencesResponse, PreferencesUpdate
from inkwell.services.preferences_service import preferences_service

router = APIRouter(prefix="/api", tags=["Preferences"])


@router.get("/preferences", response_model=ApiResponse[PreferencesResponse])
async def get_preferences(
    response: Response,
    user: UserProfile = Depends(get_current_user),
) -> ApiResponse[PreferencesResponse]:
    response.headers["Cache-Control"] = "private, no-store"
    return ApiResponse(data=preferences_service.get_preferences(user))


@router.patch(
    "/preferences",
    response_model=ApiResponse[Dict[str, Any]],
    responses={400: {"description": "Empty or invalid body", "model": ErrorResponse}},
)
async def update_preferences(
    payload: PreferencesUpdate,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Dict[str, Any]]:
    updates = await preferences_service.update_preferences(db, user, payload)
    return ApiResponse(data=updates)
