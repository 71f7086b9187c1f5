import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import bcrypt
import jwt

from app.config.settings import Settings
from app.core.exceptions import AuthError, UpstreamError, ValidationError
from app.modules.auth.provider import AuthProvider
from app.modules.auth.schemas import AuthUser, Session

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the table
        logger.warning("Stored password hash could not be parsed")
        return False


class PasswordAuthProvider(AuthProvider):
    """
    Self-hosted identities: bcrypt hashes in the ``identities`` table and
    signed HS256 tokens carrying the user id in ``sub``.

    Tokens are stateless; nothing about a session is stored server-side.
    """

    def __init__(self, identities, settings: Settings):
        self.identities = identities
        self.secret = settings.jwt_secret.get_secret_value()
        self.algorithm = settings.jwt_algorithm
        self.access_ttl = settings.jwt_expiry_minutes * 60
        self.refresh_ttl = settings.refresh_token_expiry_days * 24 * 3600

    def _to_auth_user(self, row: Dict[str, Any]) -> AuthUser:
        return AuthUser(id=str(row["id"]), email=row.get("email"), user_metadata=row.get("user_metadata") or {})

    def _encode(self, user_id: str, email: str, token_type: str, ttl: int, now: int) -> str:
        payload = {
            "sub": user_id,
            "email": email,
            "typ": token_type,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def issue_session(self, user: AuthUser) -> Session:
        now = int(time.time())
        return Session(
            access_token=self._encode(user.id, user.email, ACCESS_TOKEN_TYPE, self.access_ttl, now),
            refresh_token=self._encode(user.id, user.email, REFRESH_TOKEN_TYPE, self.refresh_ttl, now),
            token_type="bearer",
            expires_in=self.access_ttl,
            expires_at=now + self.access_ttl,
        )

    async def create_user(
        self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None
    ) -> AuthUser:
        email = email.strip().lower()
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        existing = await self.identities.fetch_one(email=email)
        if existing:
            raise UpstreamError("A user with this email address has already been registered")
        password_hash = await asyncio.to_thread(hash_password, password)
        row = await self.identities.insert({
            "id": str(uuid.uuid4()),
            "email": email,
            "password_hash": password_hash,
            "user_metadata": {k: v for k, v in (metadata or {}).items() if v is not None},
            "created_at": datetime.now(timezone.utc).isoformat(),
        })
        return self._to_auth_user(row)

    async def delete_user(self, user_id: str) -> None:
        await self.identities.delete(id=user_id)

    async def sign_in(self, email: str, password: str) -> Tuple[AuthUser, Session]:
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise AuthError("Invalid login credentials")
        try:
            row = await self.identities.fetch_one(email=email.strip().lower())
        except UpstreamError as e:
            raise AuthError(e.message)
        if not row:
            raise AuthError("Invalid login credentials")
        matches = await asyncio.to_thread(verify_password, password, row.get("password_hash") or "")
        if not matches:
            raise AuthError("Invalid login credentials")
        user = self._to_auth_user(row)
        return user, self.issue_session(user)

    async def get_user(self, token: str) -> AuthUser:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthError("token has expired")
        except jwt.InvalidTokenError:
            raise AuthError("invalid token")
        if payload.get("typ") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
            raise AuthError("invalid token")
        try:
            row = await self.identities.fetch_one(id=payload["sub"])
        except UpstreamError as e:
            raise AuthError(e.message)
        if not row:
            raise AuthError("user not found")
        return self._to_auth_user(row)
