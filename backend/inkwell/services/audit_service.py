"""
Inkwell Backend — Audit Service
================================

What:  Writes and reads the append-only audit trail.
How:   `record()` adds an AuditLog row to the caller's session and flushes
       it, so the entry commits or rolls back together with the mutation it
       describes. There is no update or delete API.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.exceptions import DatabaseError
from inkwell.models.audit_log import AuditLog
from inkwell.models.user_profile import UserProfile

logger = logging.getLogger(__name__)


class AuditService:
    async def record(
        self,
        db: AsyncSession,
        action: str,
        entity_type: str,
        entity_id: Any,
        actor: Optional[UserProfile],
        details: Optional[Dict[str, Any]] = None,
        success: bool = True,
        error_message: Optional[str] = None,
    ) -> AuditLog:
        """
        Append one audit entry.

        Args:
            action:      e.g. "article_rejected"
            entity_type: "article", "author_application", ...
            entity_id:   id of the affected row (stored as text)
            actor:       profile performing the action (None for system jobs)
            details:     JSON-serialisable context (reason, previous status...)
        """
        entry = AuditLog(
            id=uuid.uuid4(),
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            actor_id=actor.user_id if actor else None,
            actor_role=actor.role if actor else None,
            details=details or {},
            success=success,
            error_message=error_message,
        )
        try:
            db.add(entry)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to write audit entry %s for %s %s: %s",
                         action, entity_type, entity_id, e, exc_info=True)
            raise DatabaseError(context={"action": action})

        logger.info(
            "Audit: %s on %s %s by %s (%s)",
            action, entity_type, entity_id,
            entry.actor_id, "ok" if success else "failed",
        )
        return entry

    async def list_entries(
        self,
        db: AsyncSession,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        limit: int = 50,
    ) -> List[AuditLog]:
        """Newest first, optionally filtered to one entity type / entity."""
        query = select(AuditLog)
        if entity_type:
            query = query.where(AuditLog.entity_type == entity_type)
        if entity_id:
            query = query.where(AuditLog.entity_id == str(entity_id))
        query = query.order_by(AuditLog.created_at.desc()).limit(limit)

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing audit entries: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve audit entries. Please try again.")
        return list(result.scalars().all())


audit_service = AuditService()
