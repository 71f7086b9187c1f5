"""
Core dependencies for route protection and service wiring.

Everything long-lived (settings, store, auth provider) is built once in
``create_app`` and read back from ``request.app.state`` here.
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from app.config.settings import Settings
from app.core.exceptions import AuthError
from app.modules.auth.provider import AuthProvider
from app.modules.auth.schemas import AuthUser

security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request):
    return request.app.state.store


def get_auth_provider(request: Request) -> AuthProvider:
    return request.app.state.auth_provider


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> str:
    """Extract the access token from ``Authorization: Bearer <token>``"""
    if credentials is None or not credentials.credentials:
        raise AuthError("missing access token in Authorization header")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    provider: AuthProvider = Depends(get_auth_provider),
) -> AuthUser:
    """Resolve the bearer token through the configured auth provider"""
    return await provider.get_user(token)
