"""
Identity service for account and profile operations.
"""

import re
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from worldkernel.core.datastore import datastore_call
from worldkernel.core.events.event_store import EventStore
from worldkernel.core.identity.jwt import IssuedToken, JWTManager, get_jwt_manager
from worldkernel.core.identity.password import hash_password, verify_password
from worldkernel.core.models.event_log import EventType
from worldkernel.core.models.profile import Profile
from worldkernel.core.models.user import User
from worldkernel.errors import ConflictError, ValidationError
from worldkernel.logging_config import get_logger

logger = get_logger(__name__)

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,30}$")


class IdentityService:
    """
    Service for account identity operations.

    Handles signup (account + profile), authentication and profile lookup.
    """

    def __init__(self, session: AsyncSession, jwt_manager: Optional[JWTManager] = None):
        self.session = session
        self.jwt_manager = jwt_manager or get_jwt_manager()
        self.event_store = EventStore(session)

    @datastore_call
    async def signup(
        self,
        email: str,
        password: str,
        username: str,
        display_name: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> Profile:
        """
        Create an account and its public profile.

        Raises:
            ValidationError: If the username is malformed
            ConflictError: If the email or username is already taken
        """
        username = username.strip()
        if not USERNAME_PATTERN.match(username):
            raise ValidationError(
                "Username must be 3-30 letters, digits, '-' or '_'",
                field="username",
            )

        if await self.get_user_by_email(email):
            raise ConflictError("Email already registered")
        if await self.get_profile_by_username(username):
            raise ConflictError("Username already taken")

        user = User(
            email=email.lower().strip(),
            password_hash=hash_password(password),
        )
        self.session.add(user)
        try:
            await self.session.flush()
            profile = Profile(
                id=user.id,
                username=username,
                display_name=(display_name or "").strip() or None,
                bio=bio,
            )
            self.session.add(profile)
            await self.session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent signup for the same email/username
            raise ConflictError("Email or username already taken") from exc

        await self.event_store.log(
            event_type=EventType.USER_SIGNED_UP,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"username": profile.username},
        )
        logger.info("Account created", extra={"user_id": str(user.id), "username": username})

        return profile

    @datastore_call
    async def authenticate(
        self,
        email: str,
        password: str,
    ) -> Optional[tuple[Profile, IssuedToken]]:
        """
        Authenticate by email and password.

        Returns:
            Tuple of (Profile, IssuedToken) if successful, None otherwise
        """
        user = await self.get_user_by_email(email)
        if not user or not user.is_active:
            return None

        if not verify_password(password, user.password_hash):
            return None

        profile = await self.get_profile_by_id(user.id)
        if not profile:
            return None

        token = self.jwt_manager.create_access_token(
            user_id=user.id,
            username=profile.username,
        )

        await self.event_store.log(
            event_type=EventType.USER_LOGGED_IN,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"method": "password"},
        )

        return profile, token

    @datastore_call
    async def resolve_token(self, token: str) -> Optional[Profile]:
        """Profile of an active account named by a valid access token."""
        payload = self.jwt_manager.verify_access_token(token)
        if not payload:
            return None

        try:
            user_id = uuid.UUID(payload.sub)
        except ValueError:
            return None

        user = await self.get_user_by_id(user_id)
        if not user or not user.is_active:
            return None

        return await self.get_profile_by_id(user_id)

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get an account by ID."""
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get an account by email."""
        query = select(User).where(User.email == email.lower().strip())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_profile_by_id(self, profile_id: uuid.UUID) -> Optional[Profile]:
        """Get a profile by ID."""
        result = await self.session.execute(select(Profile).where(Profile.id == profile_id))
        return result.scalar_one_or_none()

    async def get_profile_by_username(self, username: str) -> Optional[Profile]:
        """Get a profile by its public handle."""
        query = select(Profile).where(Profile.username == username)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
