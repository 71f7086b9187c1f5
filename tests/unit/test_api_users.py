"""API tests for the member directory under /api/users."""

import pytest

from tests.helpers.api import bearer, signup

MEMBER = {
    "name": "Bob",
    "email": "bob@example.com",
    "password": "hunter22",
    "skills": ["python", "guitar"],
}


async def register(client, **overrides):
    return await client.post("/api/users/register", json={**MEMBER, **overrides})


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_member_without_password(self, client):
        resp = await register(client)

        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Bob"
        assert data["email"] == "bob@example.com"
        assert data["skills"] == ["python", "guitar"]
        assert set(data) == {"id", "name", "email", "skills", "created_at"}

    @pytest.mark.asyncio
    async def test_register_accepts_comma_separated_skills(self, client):
        resp = await register(client, skills="python, guitar ,")

        assert resp.status_code == 200
        assert resp.json()["skills"] == ["python", "guitar"]

    @pytest.mark.asyncio
    async def test_register_missing_name_is_400(self, client):
        resp = await client.post("/api/users/register", json={"email": "bob@example.com", "password": "x"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_email_is_500(self, client):
        await register(client)

        resp = await register(client)

        assert resp.status_code == 500
        assert "already been registered" in resp.json()["error"]

    @pytest.mark.asyncio
    async def test_member_insert_failure_rolls_back_identity(self, client, store):
        store.table("members").fail_on["insert"] = "relation \"members\" does not exist"

        resp = await register(client)

        assert resp.status_code == 500
        assert store.table("identities").rows == []


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_returns_token_and_member(self, client):
        member_id = (await register(client)).json()["id"]

        resp = await client.post("/api/users/login", json={"email": "bob@example.com", "password": "hunter22"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["token"]
        assert data["user"]["id"] == member_id
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]

    @pytest.mark.asyncio
    async def test_wrong_password_is_400_message(self, client):
        await register(client)

        resp = await client.post("/api/users/login", json={"email": "bob@example.com", "password": "nope"})

        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid login credentials"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"email": "bob@example.com"}, {"password": "hunter22"}, {}])
    async def test_missing_fields_are_400_message(self, client, body):
        resp = await client.post("/api/users/login", json=body)

        assert resp.status_code == 400
        assert resp.json() == {"message": "email and password required"}

    @pytest.mark.asyncio
    async def test_missing_body_is_400_message(self, client):
        resp = await client.post("/api/users/login")

        assert resp.status_code == 400
        assert resp.json() == {"message": "email and password required"}

    @pytest.mark.asyncio
    async def test_member_lookup_failure_is_400_message(self, client, store):
        await register(client)
        store.table("members").fail_on["fetch_one"] = "connection reset by peer"

        resp = await client.post("/api/users/login", json={"email": "bob@example.com", "password": "hunter22"})

        assert resp.status_code == 400
        assert resp.json() == {"message": "connection reset by peer"}

    @pytest.mark.asyncio
    async def test_token_is_accepted_by_profile_routes(self, client):
        # One token format for the whole app: the configured provider's
        await signup(client, email="carol@example.com", username="carol", full_name="Carol")

        resp = await client.post("/api/users/login", json={"email": "carol@example.com", "password": "pw123456"})
        assert resp.status_code == 200
        assert resp.json()["user"]["name"] == "Carol"

        profile = await client.get("/auth/profile", headers=bearer(resp.json()["token"]))
        assert profile.status_code == 200
        assert profile.json()["profile"]["username"] == "carol"


class TestListMembers:
    @pytest.mark.asyncio
    async def test_list_has_no_password_material(self, client, store):
        await register(client)
        await register(client, name="Dana", email="dana@example.com", skills=["chess"])

        resp = await client.get("/api/users")

        assert resp.status_code == 200
        data = resp.json()
        assert [m["name"] for m in data] == ["Bob", "Dana"]
        for member in data:
            assert set(member) == {"id", "name", "skills"}
        assert "hunter22" not in resp.text
        assert store.table("identities").rows[0]["password_hash"] not in resp.text

    @pytest.mark.asyncio
    async def test_empty_directory(self, client):
        resp = await client.get("/api/users")

        assert resp.status_code == 200
        assert resp.json() == []
