"""
Inkwell Backend — Reader Preference Schemas
============================================

The API speaks camelCase (`fontSize`, `accessibilityMode`); the profile
columns are snake_case. PREFERENCE_COLUMNS is the single mapping between
the two.
"""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field

from inkwell.models.user_profile import MAX_FONT_SIZE, MIN_FONT_SIZE

# API field name → user_profiles column
PREFERENCE_COLUMNS: Dict[str, str] = {
    "font_size": "reading_font_size",
    "language": "language_preference",
    "accessibility_mode": "accessibility_mode",
    "theme": "theme_preference",
}


class PreferencesUpdate(BaseModel):
    """Body of PATCH /api/preferences. Every field is optional."""

    font_size: Optional[int] = Field(
        default=None, alias="fontSize", ge=MIN_FONT_SIZE, le=MAX_FONT_SIZE
    )
    language: Optional[Literal["en", "th"]] = None
    accessibility_mode: Optional[bool] = Field(default=None, alias="accessibilityMode")
    theme: Optional[Literal["light", "dark", "system"]] = None

    model_config = {"populate_by_name": True}


class PreferencesResponse(BaseModel):
    font_size: int = Field(alias="fontSize")
    language: str
    accessibility_mode: bool = Field(alias="accessibilityMode")
    theme: str

    model_config = {"populate_by_name": True}
