"""
Inkwell Backend — Admin User Management Service
================================================

What:  Lists user profiles and lets an admin change a user's role or
       deactivate / reactivate the account.
Who:   Called by routes/user_admin.py (admin only).

Guards:
    - An admin cannot demote themself           → 403 SELF_DEMOTION_FORBIDDEN
    - An admin cannot deactivate themself       → 403 SELF_DEACTIVATION_FORBIDDEN
    - Unknown user id                           → 404 USER_NOT_FOUND
    - Role / active flag already has that value → 400 ROLE_UNCHANGED / STATUS_UNCHANGED

Every change is a guarded UPDATE on the value that was read, so a change
made concurrently by another admin is reported as 409 instead of being
silently overwritten. Role changes add a RoleChangeLog row; both kinds
of change add an audit entry in the same transaction.
"""

import logging
import math
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.exceptions import (
    ConflictError,
    DatabaseError,
    InkwellError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from inkwell.models.audit_log import RoleChangeLog
from inkwell.models.user_profile import UserProfile, UserRole
from inkwell.schemas.user_admin import Pagination
from inkwell.services.audit_service import audit_service

logger = logging.getLogger(__name__)

STATUS_FILTERS = {"active", "inactive", "all"}
SORT_FIELDS = {
    "created_at": UserProfile.created_at,
    "email": UserProfile.email,
    "role": UserProfile.role,
    "full_name": UserProfile.full_name,
}


def paginate(page: int, limit: int, total: int) -> Pagination:
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if limit else 0,
    )


class UserAdminService:
    async def list_users(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        role: Optional[str] = None,
        status: str = "all",
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[UserProfile], int]:
        """
        Profiles matching the filters, one page at a time.

        `search` matches email, full name or username, case-insensitively.
        Unknown sort fields fall back to created_at.

        Raises:
            ValidationError: unknown role or status filter
        """
        if role is not None and role not in {r.value for r in UserRole}:
            raise ValidationError(message=f"Invalid role '{role}'", field="role")
        if status not in STATUS_FILTERS:
            raise ValidationError(
                message=f"Invalid status filter '{status}'",
                field="status",
                context={"allowed": sorted(STATUS_FILTERS)},
            )

        filters = []
        if search:
            term = search.strip().lower()
            filters.append(
                or_(
                    func.lower(UserProfile.email).contains(term, autoescape=True),
                    func.lower(UserProfile.full_name).contains(term, autoescape=True),
                    func.lower(UserProfile.username).contains(term, autoescape=True),
                )
            )
        if role:
            filters.append(UserProfile.role == role)
        if status != "all":
            filters.append(UserProfile.is_active.is_(status == "active"))

        column = SORT_FIELDS.get(sort_by, UserProfile.created_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()

        try:
            total = await db.scalar(
                select(func.count(UserProfile.user_id)).where(*filters)
            ) or 0
            result = await db.execute(
                select(UserProfile)
                .where(*filters)
                .order_by(ordering, UserProfile.user_id)
                .limit(limit)
                .offset((page - 1) * limit)
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve users. Please try again.")
        return list(result.scalars().all()), total

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> UserProfile:
        try:
            profile = await db.get(UserProfile, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", user_id, e, exc_info=True)
            raise DatabaseError(context={"user_id": str(user_id)})
        if profile is None:
            raise NotFoundError(resource="user", resource_id=str(user_id), code="USER_NOT_FOUND")
        return profile

    async def change_role(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        new_role: str,
        admin: UserProfile,
        reason: Optional[str] = None,
    ) -> Tuple[UserProfile, str]:
        """
        Set a user's role. Returns the updated profile and the old role.

        Raises:
            PermissionDeniedError: admin demoting themself
            NotFoundError: unknown user
            ValidationError: user already has `new_role`
            ConflictError: role changed concurrently
        """
        if user_id == admin.user_id and new_role != UserRole.ADMIN.value:
            raise PermissionDeniedError(
                message="Cannot demote yourself from admin role",
                code="SELF_DEMOTION_FORBIDDEN",
            )

        profile = await self.get_user(db, user_id)
        old_role = profile.role
        if old_role == new_role:
            raise ValidationError(
                message=f"User already has role '{new_role}'",
                field="newRole",
                code="ROLE_UNCHANGED",
            )

        try:
            result = await db.execute(
                update(UserProfile)
                .where(UserProfile.user_id == user_id, UserProfile.role == old_role)
                .values(role=new_role)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConflictError(
                    message="User role changed while updating; reload and try again",
                    context={"user_id": str(user_id)},
                )
            db.add(
                RoleChangeLog(
                    id=uuid.uuid4(),
                    user_id=user_id,
                    old_role=old_role,
                    new_role=new_role,
                    changed_by=admin.user_id,
                    reason=reason,
                )
            )
            await db.flush()
            await db.refresh(profile)
        except InkwellError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error changing role of %s: %s", user_id, e, exc_info=True)
            raise DatabaseError(message="Failed to update role", context={"user_id": str(user_id)})

        await audit_service.record(
            db,
            action="user_role_changed",
            entity_type="user_profile",
            entity_id=user_id,
            actor=admin,
            details={"old_role": old_role, "new_role": new_role, "reason": reason},
        )
        logger.info("User %s role %s → %s by admin %s", user_id, old_role, new_role, admin.user_id)
        return profile, old_role

    async def set_active(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        is_active: bool,
        admin: UserProfile,
        reason: Optional[str] = None,
    ) -> UserProfile:
        """
        Deactivate or reactivate an account. Deactivated users are refused
        by the auth dependency on their next request.

        Raises:
            PermissionDeniedError: admin deactivating themself
            NotFoundError: unknown user
            ValidationError: account is already in that state
            ConflictError: flag changed concurrently
        """
        if user_id == admin.user_id and not is_active:
            raise PermissionDeniedError(
                message="Cannot deactivate your own admin account",
                code="SELF_DEACTIVATION_FORBIDDEN",
            )

        profile = await self.get_user(db, user_id)
        previous = profile.is_active
        if previous == is_active:
            raise ValidationError(
                message=f"User is already {'active' if is_active else 'inactive'}",
                field="is_active",
                code="STATUS_UNCHANGED",
            )

        try:
            result = await db.execute(
                update(UserProfile)
                .where(UserProfile.user_id == user_id, UserProfile.is_active.is_(previous))
                .values(is_active=is_active)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConflictError(
                    message="User status changed while updating; reload and try again",
                    context={"user_id": str(user_id)},
                )
            await db.refresh(profile)
        except InkwellError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating status of %s: %s", user_id, e, exc_info=True)
            raise DatabaseError(
                message="Failed to update user status", context={"user_id": str(user_id)}
            )

        await audit_service.record(
            db,
            action="user_activated" if is_active else "user_deactivated",
            entity_type="user_profile",
            entity_id=user_id,
            actor=admin,
            details={"previous_status": previous, "new_status": is_active, "reason": reason},
        )
        logger.info(
            "User %s %s by admin %s",
            user_id, "activated" if is_active else "deactivated", admin.user_id,
        )
        return profile


user_admin_service = UserAdminService()
