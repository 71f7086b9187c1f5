"""
Auth provider interface.

Handlers never talk to an identity backend directly; they go through one
``AuthProvider`` chosen at startup from ``AUTH_BACKEND``:

- ``supabase``: Supabase Auth (admin API + password sign-in)
- ``password``: bcrypt hashes in our own table, HS256 JWT sessions

Whichever is configured issues the only tokens accepted by protected routes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from app.config.settings import Settings
from app.database.supabase_client import SupabaseClients
from app.modules.auth.schemas import AuthUser, Session


class AuthProvider(ABC):
    @abstractmethod
    async def create_user(
        self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None
    ) -> AuthUser:
        """Create a confirmed identity. Raises UpstreamError on rejection (e.g. duplicate email)."""

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        """Remove an identity. Raises UpstreamError on failure."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Tuple[AuthUser, Session]:
        """Exchange credentials for a session. Raises AuthError on bad credentials."""

    @abstractmethod
    async def get_user(self, token: str) -> AuthUser:
        """Resolve an access token. Raises AuthError if invalid or expired."""


def build_auth_provider(settings: Settings, store, clients: Optional[SupabaseClients] = None) -> AuthProvider:
    if settings.auth_backend == "password":
        from app.modules.auth.password_provider import PasswordAuthProvider
        return PasswordAuthProvider(store.table(settings.identities_table), settings)

    from app.modules.auth.supabase_provider import SupabaseAuthProvider
    if clients is None or clients.anon is None:
        raise ValueError("Supabase auth backend needs both the service and anon clients")
    return SupabaseAuthProvider(clients.service, clients.anon, settings.store_timeout_seconds)
