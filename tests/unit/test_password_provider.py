"""Unit tests for the bcrypt + JWT auth provider."""

import jwt as pyjwt
import pytest

from app.core.exceptions import AuthError, UpstreamError, ValidationError
from app.modules.auth.password_provider import PasswordAuthProvider, hash_password, verify_password
from tests.helpers.auth import JWT_SECRET, make_test_jwt, make_test_settings
from tests.helpers.fakes import InMemoryTable


@pytest.fixture
def identities():
    return InMemoryTable("identities", unique=("id", "email"))


@pytest.fixture
def provider(identities):
    return PasswordAuthProvider(identities, make_test_settings(jwt_expiry_minutes=15))


def test_hash_round_trip():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("other", hashed)


def test_malformed_hash_does_not_verify():
    assert not verify_password("s3cret", "not-a-bcrypt-hash")


@pytest.mark.asyncio
async def test_create_user_normalizes_email_and_hashes(provider, identities):
    user = await provider.create_user("  Alice@Example.com ", "pw123456", {"full_name": "Alice", "bio": None})

    row = identities.rows[0]
    assert user.email == "alice@example.com"
    assert row["id"] == user.id
    assert row["user_metadata"] == {"full_name": "Alice"}
    assert verify_password("pw123456", row["password_hash"])


@pytest.mark.asyncio
async def test_create_user_rejects_duplicate_email(provider):
    await provider.create_user("alice@example.com", "pw123456")

    with pytest.raises(UpstreamError):
        await provider.create_user("ALICE@example.com", "another")


@pytest.mark.asyncio
async def test_sign_in_issues_access_and_refresh_tokens(provider):
    created = await provider.create_user("alice@example.com", "pw123456")

    user, session = await provider.sign_in("alice@example.com", "pw123456")

    assert user.id == created.id
    assert session.expires_in == 15 * 60
    claims = pyjwt.decode(session.access_token, JWT_SECRET, algorithms=["HS256"])
    assert claims["sub"] == created.id
    assert claims["typ"] == "access"
    assert claims["exp"] == session.expires_at
    refresh = pyjwt.decode(session.refresh_token, JWT_SECRET, algorithms=["HS256"])
    assert refresh["typ"] == "refresh"
    assert refresh["exp"] > claims["exp"]


@pytest.mark.asyncio
async def test_sign_in_wrong_password(provider):
    await provider.create_user("alice@example.com", "pw123456")

    with pytest.raises(AuthError) as exc_info:
        await provider.sign_in("alice@example.com", "wrong")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_sign_in_store_failure_is_auth_error(provider, identities):
    identities.fail_on["fetch_one"] = "store call timed out after 2s"

    with pytest.raises(AuthError):
        await provider.sign_in("alice@example.com", "pw123456")


@pytest.mark.asyncio
async def test_get_user_resolves_access_token(provider):
    created = await provider.create_user("alice@example.com", "pw123456")
    _, session = await provider.sign_in("alice@example.com", "pw123456")

    user = await provider.get_user(session.access_token)

    assert user.id == created.id
    assert user.email == "alice@example.com"


@pytest.mark.asyncio
async def test_get_user_rejects_expired_token(provider):
    created = await provider.create_user("alice@example.com", "pw123456")

    with pytest.raises(AuthError, match="expired"):
        await provider.get_user(make_test_jwt(created.id, expires_in=-10))


@pytest.mark.asyncio
async def test_get_user_rejects_token_signed_with_other_secret(provider):
    created = await provider.create_user("alice@example.com", "pw123456")
    forged = pyjwt.encode({"sub": created.id, "typ": "access", "exp": 9999999999}, "other-secret-other-secret-other-secret", algorithm="HS256")

    with pytest.raises(AuthError):
        await provider.get_user(forged)


@pytest.mark.asyncio
async def test_get_user_for_deleted_identity(provider):
    created = await provider.create_user("alice@example.com", "pw123456")
    _, session = await provider.sign_in("alice@example.com", "pw123456")

    await provider.delete_user(created.id)

    with pytest.raises(AuthError, match="user not found"):
        await provider.get_user(session.access_token)


@pytest.mark.asyncio
async def test_create_user_rejects_password_over_72_bytes(provider, identities):
    with pytest.raises(ValidationError, match="72 bytes"):
        await provider.create_user("alice@example.com", "é" * 40)

    assert identities.rows == []


@pytest.mark.asyncio
async def test_sign_in_with_password_over_72_bytes(provider):
    await provider.create_user("alice@example.com", "p" * 72)

    with pytest.raises(AuthError, match="Invalid login credentials"):
        await provider.sign_in("alice@example.com", "p" * 80)
