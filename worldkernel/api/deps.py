"""
FastAPI dependencies for authentication and database sessions.

The caller's profile is resolved once per request and passed explicitly
into every service call; nothing reads a global "current user".
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from worldkernel.config import get_settings
from worldkernel.core.identity.identity_service import IdentityService
from worldkernel.core.models.profile import Profile
from worldkernel.database import get_db
from worldkernel.errors import AuthError


# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_profile_optional(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
) -> Optional[Profile]:
    """Caller's profile if a valid bearer token was sent, None otherwise."""
    if not credentials:
        return None

    return await IdentityService(db).resolve_token(credentials.credentials)


async def get_current_profile(
    profile: Annotated[Optional[Profile], Depends(get_current_profile_optional)],
) -> Profile:
    """Caller's profile or raise AuthError (401)."""
    if profile is None:
        raise AuthError("Not authenticated")
    return profile


CurrentProfile = Annotated[Profile, Depends(get_current_profile)]
OptionalProfile = Annotated[Optional[Profile], Depends(get_current_profile_optional)]


def get_request_id(request: Request) -> Optional[str]:
    """Get request correlation ID (set by RequestIdMiddleware)."""
    return getattr(request.state, "request_id", None)


def clamp_limit(limit: Optional[int]) -> int:
    """Listing size within the configured bounds."""
    settings = get_settings()
    if limit is None:
        return settings.feed_default_limit
    return max(1, min(limit, settings.feed_max_limit))
