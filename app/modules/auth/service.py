import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.exceptions import (
    NotFoundError, SkillSwapError, UpstreamError, ValidationError,
)
from app.modules.auth.provider import AuthProvider
from app.modules.auth.schemas import (
    AuthUser, LoginRequest, LoginResponse, Profile, ProfileResponse, ProfileUpdate,
    SignupRequest, SignupResponse, SignupUser,
)

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def delete_identity_quietly(provider: AuthProvider, user_id: str) -> None:
    """Compensating delete after a failed follow-up insert. Never raises."""
    try:
        await provider.delete_user(user_id)
        logger.info(f"Rolled back identity {user_id}")
    except Exception as e:
        logger.warning(f"Rollback of identity {user_id} failed: {e}")


class AuthService:
    def __init__(self, provider: AuthProvider, profiles):
        self.provider = provider
        self.profiles = profiles

    async def _fetch_profile(self, user_id: str) -> Optional[Profile]:
        row = await self.profiles.fetch_one(id=user_id)
        return Profile(**row) if row else None

    async def _fetch_profile_or_none(self, user_id: str) -> Optional[Profile]:
        """Trailing read after signup/login; a failure must not discard the session"""
        try:
            return await self._fetch_profile(user_id)
        except UpstreamError as e:
            logger.warning(f"Profile fetch failed for {user_id}: {e.message}")
            return None

    async def signup(self, signup_data: SignupRequest) -> SignupResponse:
        """Create identity, provision profile, then sign in for a session"""
        try:
            user = await self.provider.create_user(
                signup_data.email,
                signup_data.password,
                {"full_name": signup_data.full_name},
            )
        except SkillSwapError as e:
            raise UpstreamError(e.message)

        try:
            await self.profiles.insert({
                "id": user.id,
                "username": signup_data.username,
                "full_name": signup_data.full_name,
                "avatar_url": signup_data.avatar_url,
                "role": "user",
                "updated_at": utcnow().isoformat(),
            })
        except SkillSwapError as e:
            logger.warning(f"Profile insert failed for {user.id}: {e.message}")
            await delete_identity_quietly(self.provider, user.id)
            raise UpstreamError(e.message)

        try:
            _, session = await self.provider.sign_in(signup_data.email, signup_data.password)
        except SkillSwapError as e:
            raise UpstreamError(e.message)

        logger.info(f"User {user.id} signed up")
        return SignupResponse(
            message="user created",
            user=SignupUser(id=user.id, email=user.email or signup_data.email),
            session=session,
            profile=await self._fetch_profile_or_none(user.id),
        )

    async def login(self, login_data: LoginRequest) -> LoginResponse:
        """Sign in and return the session with the caller's profile"""
        user, session = await self.provider.sign_in(login_data.email, login_data.password)
        return LoginResponse(session=session, profile=await self._fetch_profile_or_none(user.id))

    async def get_profile(self, user: AuthUser) -> ProfileResponse:
        profile = await self._fetch_profile(user.id)
        if profile is None:
            raise NotFoundError("profile not found")
        return ProfileResponse(profile=profile)

    async def update_profile(self, user: AuthUser, update_data: ProfileUpdate) -> ProfileResponse:
        """Apply allow-listed fields and stamp updated_at"""
        updates = update_data.changes()
        if not updates:
            raise ValidationError("no updatable fields provided")
        updates["updated_at"] = utcnow().isoformat()

        await self.profiles.update(updates, id=user.id)

        profile = await self._fetch_profile(user.id)
        if profile is None:
            raise NotFoundError("profile not found")
        return ProfileResponse(profile=profile)
