# tests/fixtures/app.py

"""
🧩 App Fixture:
- Builds the real app through `create_app` with test settings
- Injects the per-test in-memory `Database`
- Hands out HTTP clients (one cookie jar each) for integration tests
"""

from contextlib import AsyncExitStack
from typing import AsyncGenerator, Awaitable, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from anistream.core.config import Settings
from anistream.db.session import Database
from anistream.main import create_app
from tests.fixtures.db import TEST_DATABASE_URL

API = "/api"


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL=TEST_DATABASE_URL,
        RATE_LIMIT_ENABLED=False,
        CORS_ORIGINS="http://localhost:5173",
    )


@pytest.fixture()
def app(test_settings: Settings, database: Database) -> FastAPI:
    """🧪 The production app wired to the test database."""
    return create_app(test_settings, database)


@pytest.fixture()
async def client_factory(app: FastAPI) -> AsyncGenerator[Callable[[], Awaitable[AsyncClient]], None]:
    """Each call returns a new client with its own cookie jar (one per simulated browser)."""
    async with AsyncExitStack() as stack:

        async def _make() -> AsyncClient:
            return await stack.enter_async_context(
                AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
            )

        yield _make


@pytest.fixture()
async def async_client(client_factory) -> AsyncClient:
    """🌐 Anonymous client."""
    return await client_factory()


__all__ = ["API", "test_settings", "app", "client_factory", "async_client"]
