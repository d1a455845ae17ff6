"""
Inkwell Backend — Audit Trail Route (admin, read-only)
=======================================================
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth import require_admin
from inkwell.database import get_db_session
from inkwell.models.user_profile import UserProfile
from inkwell.schemas.audit import AuditLogListResponse, AuditLogResponse
from inkwell.schemas.common import ApiResponse
from inkwell.services.audit_service import audit_service

router = APIRouter(prefix="/api/admin", tags=["Audit"])


@router.get(
    "/audit-logs",
    response_model=ApiResponse[AuditLogListResponse],
    summary="Recent audit entries, newest first",
)
async def list_audit_logs(
    response: Response,
    entity_type: Optional[str] = Query(default=None),
    entity_id: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    admin: UserProfile = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuditLogListResponse]:
    entries = await audit_service.list_entries(
        db, entity_type=entity_type, entity_id=entity_id, limit=limit
    )
    response.headers["Cache-Control"] = "no-store"
    return ApiResponse(
        data=AuditLogListResponse(
            entries=[AuditLogResponse.model_validate(e) for e in entries],
            count=len(entries),
        )
    )
