import logging
from datetime import datetime, timezone
from typing import List

from app.core.exceptions import AuthError, SkillSwapError, UpstreamError
from app.modules.auth.provider import AuthProvider
from app.modules.auth.service import delete_identity_quietly
from app.modules.users.schemas import (
    MemberLogin, MemberLoginResponse, MemberRegister, MemberResponse, MemberSummary,
)

logger = logging.getLogger(__name__)


class MemberService:
    """Skill directory on top of the configured auth provider."""

    def __init__(self, provider: AuthProvider, members):
        self.provider = provider
        self.members = members

    async def register(self, member_data: MemberRegister) -> MemberResponse:
        try:
            user = await self.provider.create_user(
                member_data.email,
                member_data.password,
                {"name": member_data.name},
            )
        except SkillSwapError as e:
            raise UpstreamError(e.message, status_code=500)

        try:
            row = await self.members.insert({
                "id": user.id,
                "name": member_data.name,
                "email": user.email or member_data.email,
                "skills": member_data.skills,
                "created_at": datetime.now(timezone.utc).isoformat(),
            })
        except SkillSwapError as e:
            logger.warning(f"Member insert failed for {user.id}: {e.message}")
            await delete_identity_quietly(self.provider, user.id)
            raise UpstreamError(e.message, status_code=500)

        logger.info(f"Member {user.id} registered")
        return MemberResponse(**row)

    async def login(self, login_data: MemberLogin) -> MemberLoginResponse:
        """Sign in; any failure is reported as a 400 AuthError"""
        if not login_data.email or not login_data.password:
            raise AuthError("email and password required", status_code=400)
        try:
            user, session = await self.provider.sign_in(login_data.email, login_data.password)
        except SkillSwapError as e:
            raise AuthError(e.message, status_code=400)

        try:
            row = await self.members.fetch_one(id=user.id)
        except SkillSwapError as e:
            raise AuthError(e.message, status_code=400)
        if row:
            member = MemberResponse(**row)
        else:
            # Identity created through /auth/signup has no directory entry
            member = MemberResponse(
                id=user.id,
                name=user.user_metadata.get("name") or user.user_metadata.get("full_name"),
                email=user.email,
            )
        return MemberLoginResponse(token=session.access_token, user=member)

    async def list_members(self) -> List[MemberSummary]:
        rows = await self.members.list(columns="id, name, skills", order_by="created_at")
        return [MemberSummary(**row) for row in rows]
