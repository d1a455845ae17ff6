"""
Inkwell Backend — Reader Preferences Service
=============================================

Partial updates of the reader-facing profile settings. Only fields the
client actually sent are written.
"""

import logging
from typing import Any, Dict

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.exceptions import DatabaseError, ValidationError
from inkwell.models.user_profile import UserProfile
from inkwell.schemas.preferences import (
    PREFERENCE_COLUMNS,
    PreferencesResponse,
    PreferencesUpdate,
)

logger = logging.getLogger(__name__)


class PreferencesService:
    def get_preferences(self, user: UserProfile) -> PreferencesResponse:
        return PreferencesResponse(
            font_size=user.reading_font_size,
            language=user.language_preference,
            accessibility_mode=user.accessibility_mode,
            theme=user.theme_preference,
        )

    async def update_preferences(
        self,
        db: AsyncSession,
        user: UserProfile,
        payload: PreferencesUpdate,
    ) -> Dict[str, Any]:
        """
        Write the supplied preferences and return them keyed by column name.

        Raises:
            ValidationError: the body set no preference at all
        """
        supplied = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if not supplied:
            raise ValidationError(
                message="No preferences to update",
                context={"allowed": ["fontSize", "language", "accessibilityMode", "theme"]},
            )

        updates = {PREFERENCE_COLUMNS[field]: value for field, value in supplied.items()}
        try:
            await db.execute(
                update(UserProfile)
                .where(UserProfile.user_id == user.user_id)
                .values(**updates)
            )
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update preferences for %s: %s", user.user_id, e, exc_info=True)
            raise DatabaseError(message="Failed to update preferences")

        logger.info("Preferences updated for %s: %s", user.user_id, sorted(updates))
        return updates


preferences_service = PreferencesService()
