"""
Inkwell Backend — Author Application Service
=============================================

What:  Submission of author applications by readers and their one-time
       review by an admin.
Who:   Called by routes/author_applications.py.

Review flow:
    1. Load the application (404 if unknown)
    2. Refuse anything not `pending` (409 ALREADY_REVIEWED)
    3. Guarded UPDATE ... WHERE status = 'pending' (409 ALREADY_REVIEWED on race)
    4. Approved: applicant role → author, plus a RoleChangeLog row
    5. Audit entry author_application_approved / _rejected
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.exceptions import (
    AlreadyReviewedError,
    ApplicationExistsError,
    ConflictError,
    DatabaseError,
    InkwellError,
    NotFoundError,
    ValidationError,
)
from inkwell.models.audit_log import RoleChangeLog
from inkwell.models.author_application import ApplicationStatus, AuthorApplication
from inkwell.models.base import utc_now
from inkwell.models.user_profile import UserProfile, UserRole
from inkwell.schemas.application import (
    AdminApplicationItem,
    ApplicantSummary,
    AuthorApplicationCreate,
)
from inkwell.services.audit_service import audit_service
from inkwell.services.workflow import can_transition, guarded_update, transition_action

logger = logging.getLogger(__name__)

ROLE_CHANGE_REASON = "Author application approved"
STATUS_FILTER_ALL = "all"


class ApplicationService:
    async def submit(
        self,
        db: AsyncSession,
        user: UserProfile,
        payload: AuthorApplicationCreate,
    ) -> AuthorApplication:
        """
        Create the caller's application.

        Raises:
            ConflictError: caller is already an author or admin
            ApplicationExistsError: caller already has an application
        """
        if user.role in (UserRole.AUTHOR.value, UserRole.ADMIN.value):
            raise ConflictError(
                message="You already have author privileges",
                context={"role": user.role},
            )

        existing = await self.get_for_user(db, user)
        if existing is not None:
            raise ApplicationExistsError(existing_status=existing.status)

        application = AuthorApplication(
            id=uuid.uuid4(),
            user_id=user.user_id,
            bio=payload.bio,
            credentials=payload.credentials,
            writing_samples=payload.writing_samples,
            motivation=payload.motivation,
            status=ApplicationStatus.PENDING.value,
        )
        try:
            db.add(application)
            await db.flush()
        except IntegrityError:
            # Lost a race against a concurrent submission by the same user
            logger.warning("Duplicate author application for user %s", user.user_id)
            raise ApplicationExistsError(existing_status=ApplicationStatus.PENDING.value)
        except SQLAlchemyError as e:
            logger.error("Database error creating application: %s", e, exc_info=True)
            raise DatabaseError(message="Could not submit your application. Please try again.")

        logger.info("Author application %s submitted by %s", application.id, user.user_id)
        return application

    async def get_for_user(
        self, db: AsyncSession, user: UserProfile
    ) -> Optional[AuthorApplication]:
        try:
            result = await db.execute(
                select(AuthorApplication).where(AuthorApplication.user_id == user.user_id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error loading application for %s: %s",
                         user.user_id, e, exc_info=True)
            raise DatabaseError()
        return result.scalar_one_or_none()

    async def list_for_admin(
        self, db: AsyncSession, status: str = ApplicationStatus.PENDING.value
    ) -> List[AdminApplicationItem]:
        """Applications in `status` (or every status for "all"), newest first."""
        valid = {s.value for s in ApplicationStatus} | {STATUS_FILTER_ALL}
        if status not in valid:
            raise ValidationError(
                message=f"Invalid status filter '{status}'",
                field="status",
                context={"allowed": sorted(valid)},
            )

        query = select(AuthorApplication, UserProfile).outerjoin(
            UserProfile, UserProfile.user_id == AuthorApplication.user_id
        )
        if status != STATUS_FILTER_ALL:
            query = query.where(AuthorApplication.status == status)
        query = query.order_by(AuthorApplication.created_at.desc())

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing applications: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve applications. Please try again.")

        items = []
        for application, applicant in result.all():
            item = AdminApplicationItem.model_validate(application)
            if applicant is not None:
                item.applicant = ApplicantSummary(
                    id=applicant.user_id,
                    email=applicant.email,
                    full_name=applicant.full_name,
                    avatar_url=applicant.avatar_url,
                )
            items.append(item)
        return items

    async def review(
        self,
        db: AsyncSession,
        application_id: uuid.UUID,
        admin: UserProfile,
        status: str,
        reason: Optional[str] = None,
    ) -> AuthorApplication:
        """
        Approve or reject a pending application. Each application is
        reviewed exactly once.

        Raises:
            NotFoundError: unknown application id
            AlreadyReviewedError: not pending (before or during the update)
        """
        if status not in (ApplicationStatus.APPROVED.value, ApplicationStatus.REJECTED.value):
            raise ValidationError(message=f"Invalid review status '{status}'", field="status")

        try:
            application = await db.get(AuthorApplication, application_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading application %s: %s",
                         application_id, e, exc_info=True)
            raise DatabaseError(context={"application_id": str(application_id)})
        if application is None:
            raise NotFoundError(resource="application", resource_id=str(application_id))

        if not can_transition(application.status, status, entity_type="author_application"):
            raise AlreadyReviewedError(str(application_id), current_status=application.status)

        action = transition_action(application.status, status, entity_type="author_application")
        approved = status == ApplicationStatus.APPROVED.value

        try:
            applied = await guarded_update(
                db,
                AuthorApplication,
                application.id,
                ApplicationStatus.PENDING.value,
                {
                    "status": status,
                    "reviewed_by": admin.user_id,
                    "reviewed_at": utc_now(),
                    "rejection_reason": None if approved else reason,
                },
            )
            if not applied:
                raise AlreadyReviewedError(str(application_id))
            await db.refresh(application)

            old_role = None
            if approved:
                old_role = await self._promote_to_author(db, application.user_id, admin)
        except InkwellError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error reviewing application %s: %s",
                         application_id, e, exc_info=True)
            raise DatabaseError(context={"application_id": str(application_id)})

        details = {"applicant_id": str(application.user_id), "new_status": status}
        if approved:
            details["old_role"] = old_role
            details["new_role"] = UserRole.AUTHOR.value
        else:
            details["rejection_reason"] = reason
        await audit_service.record(
            db,
            action=action,
            entity_type="author_application",
            entity_id=application.id,
            actor=admin,
            details=details,
        )
        logger.info("Author application %s %s by admin %s", application.id, status, admin.user_id)
        return application

    async def _promote_to_author(
        self, db: AsyncSession, user_id: uuid.UUID, admin: UserProfile
    ) -> Optional[str]:
        """Set the applicant's role to author and log the change. Returns the old role."""
        old_role = await db.scalar(select(UserProfile.role).where(UserProfile.user_id == user_id))
        if old_role is None:
            raise NotFoundError(resource="user profile", resource_id=str(user_id))

        await db.execute(
            update(UserProfile)
            .where(UserProfile.user_id == user_id)
            .values(role=UserRole.AUTHOR.value)
        )
        db.add(
            RoleChangeLog(
                id=uuid.uuid4(),
                user_id=user_id,
                old_role=old_role,
                new_role=UserRole.AUTHOR.value,
                changed_by=admin.user_id,
                reason=ROLE_CHANGE_REASON,
            )
        )
        await db.flush()
        logger.info("User %s promoted from %s to author", user_id, old_role)
        return old_role


application_service = ApplicationService()
