import logging
from typing import Any, Dict, Optional, Tuple

from supabase import Client

from app.core.exceptions import AuthError, SkillSwapError, UpstreamError, error_message
from app.database.supabase_client import call_store
from app.modules.auth.provider import AuthProvider
from app.modules.auth.schemas import AuthUser, Session

logger = logging.getLogger(__name__)


def _to_auth_user(user: Any) -> AuthUser:
    return AuthUser(
        id=str(user.id),
        email=user.email,
        user_metadata=user.user_metadata or {},
    )


def _to_session(session: Any) -> Session:
    return Session(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        token_type=session.token_type or "bearer",
        expires_in=session.expires_in,
        expires_at=session.expires_at,
    )


class SupabaseAuthProvider(AuthProvider):
    """
    Supabase Auth backed identities.

    Admin calls (create/delete/get_user) use the service-role client. Password
    sign-in uses the anon client so the service client never picks up a user
    session and keeps bypassing RLS.
    """

    def __init__(self, service: Client, anon: Client, timeout: float):
        self.service = service
        self.anon = anon
        self.timeout = timeout

    async def create_user(
        self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None
    ) -> AuthUser:
        payload = {
            "email": email,
            "password": password,
            "email_confirm": True,  # no email verification step
            "user_metadata": {k: v for k, v in (metadata or {}).items() if v is not None},
        }
        try:
            response = await call_store(self.service.auth.admin.create_user, payload, timeout=self.timeout)
        except SkillSwapError:
            raise
        except Exception as e:
            raise UpstreamError(error_message(e))
        if not response or not response.user:
            raise UpstreamError("Failed to create user")
        return _to_auth_user(response.user)

    async def delete_user(self, user_id: str) -> None:
        try:
            await call_store(self.service.auth.admin.delete_user, user_id, timeout=self.timeout)
        except SkillSwapError:
            raise
        except Exception as e:
            raise UpstreamError(error_message(e))

    async def sign_in(self, email: str, password: str) -> Tuple[AuthUser, Session]:
        try:
            response = await call_store(
                self.anon.auth.sign_in_with_password,
                {"email": email, "password": password},
                timeout=self.timeout,
            )
        except UpstreamError as e:
            raise AuthError(e.message)
        except Exception as e:
            raise AuthError(error_message(e))
        if not response or not response.session:
            raise AuthError("Invalid login credentials")
        if not response.user or not response.user.id:
            raise UpstreamError("could not get user after sign-in", status_code=500)
        return _to_auth_user(response.user), _to_session(response.session)

    async def get_user(self, token: str) -> AuthUser:
        try:
            response = await call_store(self.service.auth.get_user, token, timeout=self.timeout)
        except UpstreamError as e:
            raise AuthError(e.message)
        except Exception as e:
            raise AuthError(error_message(e))
        if not response or not response.user:
            raise AuthError("invalid token")
        return _to_auth_user(response.user)
