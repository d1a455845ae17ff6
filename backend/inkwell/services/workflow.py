"""
Inkwell Backend — Status Workflow
==================================

What:  Declarative transition tables for articles and author applications,
       plus the guarded single-row update that applies a transition.
Who:   Used by ArticleService, ModerationService and ApplicationService.

Article:
    draft ────────────▶ pending_approval   article_submitted   (owner or admin)
    pending_approval ─▶ published          article_approved    (admin)
    pending_approval ─▶ draft              article_rejected    (admin)
    published ────────▶ archived           article_unpublished (admin)

AuthorApplication:
    pending ──▶ approved   author_application_approved
    pending ──▶ rejected   author_application_rejected

Guarded update:
    UPDATE <table> SET ... WHERE id = :id AND status = :expected

    The status check and the write are one statement, so two admins
    racing on the same row cannot both win: the loser's statement matches
    zero rows and the row keeps the winner's values. The row-level
    guarantee of the database is the only concurrency control.
"""

import logging
import uuid
from typing import Any, Dict, Optional, Tuple, Type

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.database import Base
from inkwell.exceptions import InvalidTransitionError
from inkwell.models.article import ArticleStatus
from inkwell.models.author_application import ApplicationStatus

logger = logging.getLogger(__name__)

# (from, to) → audit action
ARTICLE_TRANSITIONS: Dict[Tuple[str, str], str] = {
    (ArticleStatus.DRAFT.value, ArticleStatus.PENDING_APPROVAL.value): "article_submitted",
    (ArticleStatus.PENDING_APPROVAL.value, ArticleStatus.PUBLISHED.value): "article_approved",
    (ArticleStatus.PENDING_APPROVAL.value, ArticleStatus.DRAFT.value): "article_rejected",
    (ArticleStatus.PUBLISHED.value, ArticleStatus.ARCHIVED.value): "article_unpublished",
}

APPLICATION_TRANSITIONS: Dict[Tuple[str, str], str] = {
    (ApplicationStatus.PENDING.value, ApplicationStatus.APPROVED.value): "author_application_approved",
    (ApplicationStatus.PENDING.value, ApplicationStatus.REJECTED.value): "author_application_rejected",
}

_TABLES = {
    "article": ARTICLE_TRANSITIONS,
    "author_application": APPLICATION_TRANSITIONS,
}

# Shown to the client when an article is not in the state a transition needs
_REQUIRED_STATE_MESSAGES = {
    ArticleStatus.DRAFT.value: "Only draft articles can be submitted for review",
    ArticleStatus.PENDING_APPROVAL.value: "Article is not pending approval",
    ArticleStatus.PUBLISHED.value: "Article is not published",
}


def _value(status: Any) -> str:
    return status.value if hasattr(status, "value") else str(status)


def can_transition(current: Any, target: Any, entity_type: str = "article") -> bool:
    """True when the table for `entity_type` allows current → target."""
    return (_value(current), _value(target)) in _TABLES[entity_type]


def transition_action(current: Any, target: Any, entity_type: str = "article") -> str:
    """Audit action name for an allowed transition (KeyError otherwise)."""
    return _TABLES[entity_type][(_value(current), _value(target))]


def required_source(target: Any, entity_type: str = "article") -> Optional[str]:
    """The status an entity must be in to move to `target`, if any."""
    target = _value(target)
    for source, dest in _TABLES[entity_type]:
        if dest == target:
            return source
    return None


def ensure_article_transition(current: Any, target: Any) -> str:
    """
    Validate an article transition and return its audit action.

    Raises:
        InvalidTransitionError: current → target is not in the table. The
            error names the current status and the status required.
    """
    current, target = _value(current), _value(target)
    if can_transition(current, target):
        return transition_action(current, target)

    expected = required_source(target)
    raise InvalidTransitionError(
        message=_REQUIRED_STATE_MESSAGES.get(
            expected, f"Cannot move article from {current} to {target}"
        ),
        entity_type="article",
        current_status=current,
        target_status=target,
        required_status=expected,
    )


async def guarded_update(
    db: AsyncSession,
    model: Type[Base],
    entity_id: uuid.UUID,
    expected_status: str,
    values: Dict[str, Any],
    *criteria: Any,
) -> bool:
    """
    Apply `values` to one row only if its status is still `expected_status`.

    Extra `criteria` are ANDed into the WHERE clause (e.g. the soft-delete
    filter). Returns False when no row matched; the caller reports that as
    a conflict. The ORM instance, if loaded, is stale afterwards and must
    be refreshed.
    """
    stmt = (
        update(model)
        .where(model.id == entity_id, model.status == expected_status, *criteria)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount != 1:
        logger.warning(
            "Guarded update on %s %s matched %d rows (expected status '%s')",
            model.__tablename__, entity_id, result.rowcount, expected_status,
        )
        return False
    return True
