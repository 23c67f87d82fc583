# tests/fixtures/db.py
"""
DB fixtures for tests (async, SQLite in memory):
- One fresh `Database` per test; schema created from the ORM metadata
- `StaticPool` keeps the single in-memory connection alive for the whole test
- Foreign keys enforced, so ON DELETE CASCADE behaves as on Postgres
"""

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.db.session import Database

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
async def database() -> AsyncGenerator[Database, None]:
    db = Database(TEST_DATABASE_URL)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture()
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Short-lived session for assertions; open it after the requests under test."""
    async with database.session() as session:
        yield session


__all__ = ["TEST_DATABASE_URL", "anyio_backend", "database", "db_session"]
