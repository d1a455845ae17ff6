"""
Inkwell Backend — Admin User Management Routes
===============================================

Endpoints (admin only):
    GET  /api/admin/users?search=&role=&status=active|inactive|all
                         &sort_by=&sort_order=asc|desc&page=1&limit=50
    POST /api/admin/users/{user_id}/role         body {newRole, reason?}
    POST /api/admin/users/{user_id}/deactivate   body {is_active, reason?}
"""

import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth import require_admin
from inkwell.database import get_db_session
from inkwell.models.base import utc_now
from inkwell.models.user_profile import UserProfile
from inkwell.schemas.common import ApiResponse, ErrorResponse
from inkwell.schemas.user_admin import (
    ActivationRequest,
    ActivationResult,
    RoleChangeRequest,
    RoleChangeResult,
    UserListItem,
    UserListResponse,
)
from inkwell.services.user_admin_service import paginate, user_admin_service

router = APIRouter(prefix="/api/admin/users", tags=["User Management"])

CHANGE_RESPONSES = {
    400: {"description": "Value unchanged or invalid body", "model": ErrorResponse},
    403: {"description": "Not an admin, or acting on your own account", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
    409: {"description": "Changed concurrently", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ApiResponse[UserListResponse],
    summary="List users",
)
async def list_users(
    response: Response,
    search: Optional[str] = Query(default=None, max_length=100),
    role: Optional[str] = Query(default=None),
    status: str = Query(default="all"),
    sort_by: str = Query(default="created_at"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=100),
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserListResponse]:
    users, total = await user_admin_service.list_users(
        db,
        search=search,
        role=role,
        status=status,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    response.headers["Cache-Control"] = "no-store"
    response.headers["X-Total-Count"] = str(total)
    return ApiResponse(
        data=UserListResponse(
            users=[
                UserListItem(
                    id=u.user_id,
                    email=u.email,
                    full_name=u.full_name,
                    username=u.username,
                    role=u.role,
                    is_active=u.is_active,
                    created_at=u.created_at,
                )
                for u in users
            ],
            pagination=paginate(page, limit, total),
        )
    )


@router.post(
    "/{user_id}/role",
    response_model=ApiResponse[RoleChangeResult],
    responses=CHANGE_RESPONSES,
    summary="Change a user's role",
)
async def change_role(
    user_id: uuid.UUID,
    body: RoleChangeRequest,
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RoleChangeResult]:
    profile, old_role = await user_admin_service.change_role(
        db, user_id, body.new_role, admin, reason=body.reason
    )
    return ApiResponse(
        data=RoleChangeResult(
            user_id=profile.user_id,
            old_role=old_role,
            new_role=profile.role,
            changed_by=admin.user_id,
            changed_at=utc_now(),
        )
    )


@router.post(
    "/{user_id}/deactivate",
    response_model=ApiResponse[ActivationResult],
    responses=CHANGE_RESPONSES,
    summary="Deactivate or reactivate a user",
)
async def set_active(
    user_id: uuid.UUID,
    body: ActivationRequest,
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ActivationResult]:
    profile = await user_admin_service.set_active(
        db, user_id, body.is_active, admin, reason=body.reason
    )
    return ApiResponse(
        data=ActivationResult(
            user_id=profile.user_id,
            is_active=profile.is_active,
            changed_by=admin.user_id,
            changed_at=utc_now(),
        )
    )
