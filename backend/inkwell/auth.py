"""
Inkwell Backend — Authentication & Authorization
=================================================

What:  FastAPI dependencies that identify the caller and enforce roles.
How:   Access tokens are HS256 JWTs issued by the hosted auth provider.
       The API only verifies them (signature, expiry, audience) with PyJWT
       and loads the matching UserProfile. Credentials are never issued here.
Who:   Every route that needs a user depends on `get_current_user`,
       `get_optional_user` or a `require_role(...)` dependency.

Role hierarchy:
    reader (1) < author (2) < admin (3)
"""

import logging
import uuid
from typing import Any, Callable, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.config import settings
from inkwell.database import get_db_session
from inkwell.exceptions import AuthenticationError, PermissionDeniedError
from inkwell.models.user_profile import UserProfile, UserRole

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is reported through AuthenticationError
# so it gets the standard error envelope instead of FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)

ROLE_LEVELS: Dict[str, int] = {
    UserRole.READER.value: 1,
    UserRole.AUTHOR.value: 2,
    UserRole.ADMIN.value: 3,
}


def has_permission(role: str, required: str) -> bool:
    """True when `role` sits at or above `required` in the hierarchy."""
    return ROLE_LEVELS.get(role, 0) >= ROLE_LEVELS.get(required, 99)


def is_admin(user: Optional[UserProfile]) -> bool:
    return user is not None and user.role == UserRole.ADMIN.value


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify an access token and return its claims.

    Raises:
        AuthenticationError: bad signature, expired, wrong audience, missing
            `sub`/`exp`, or the server has no secret configured.
    """
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured; rejecting authenticated request")
        raise AuthenticationError("Authentication is not available")

    audience = settings.jwt_audience or None
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=audience,
            options={"require": ["exp", "sub"], "verify_aud": audience is not None},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Authentication token has expired")
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected access token: %s", e)
        raise AuthenticationError("Invalid authentication token")


async def _load_profile(db: AsyncSession, token: str) -> UserProfile:
    claims = decode_access_token(token)
    try:
        user_id = uuid.UUID(str(claims["sub"]))
    except ValueError:
        raise AuthenticationError("Invalid authentication token")

    result = await db.execute(select(UserProfile).where(UserProfile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise AuthenticationError("User profile not found")
    if not profile.is_active:
        raise AuthenticationError("User account is deactivated")
    return profile


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    """The authenticated caller's profile; 401 when there is none."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return await _load_profile(db, credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[UserProfile]:
    """
    Like get_current_user, but anonymous callers get None.

    A token that is present but invalid is still a 401.
    """
    if credentials is None or not credentials.credentials:
        return None
    return await _load_profile(db, credentials.credentials)


def require_role(*roles: str) -> Callable:
    """
    Dependency factory restricting a route to the given roles.

    Usage:
        @router.post("/x", dependencies=[Depends(require_role("admin"))])
        async def handler(admin: UserProfile = Depends(require_role("admin"))): ...
    """
    allowed = {r.value if isinstance(r, UserRole) else r for r in roles}

    async def role_checker(user: UserProfile = Depends(get_current_user)) -> UserProfile:
        if user.role not in allowed:
            logger.warning(
                "Forbidden: user %s with role '%s' needs one of %s",
                user.user_id, user.role, sorted(allowed),
            )
            raise PermissionDeniedError(
                context={"required_roles": sorted(allowed), "role": user.role}
            )
        return user

    return role_checker


require_admin = require_role(UserRole.ADMIN.value)
require_author = require_role(UserRole.AUTHOR.value, UserRole.ADMIN.value)
