"""
Small request-scoped helpers shared by route modules.
"""

from typing import Optional

from fastapi import Request

from inkwell.models.user_profile import UserProfile
from inkwell.services.i18n import negotiate_locale


def resolve_locale(
    request: Request,
    user: Optional[UserProfile] = None,
    lang: Optional[str] = None,
) -> str:
    """?lang= beats the user's saved preference, which beats Accept-Language."""
    return negotiate_locale(
        explicit=lang,
        accept_language=request.headers.get("accept-language"),
        user_pref=user.language_preference if user else None,
    )
