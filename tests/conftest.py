"""Shared fixtures: an app wired to an in-memory store and the password backend."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.main import create_app
from tests.helpers.auth import make_test_settings
from tests.helpers.fakes import InMemoryStore


@pytest.fixture
def test_settings():
    return make_test_settings()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def app(test_settings, store):
    return create_app(test_settings, store=store)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

