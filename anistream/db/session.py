# anistream/db/session.py
from __future__ import annotations

"""
AniStream: Database handle & session dependencies

- `Database` owns one async engine and its session factory. It is constructed
  explicitly (by `create_app` or a test fixture) and stored on `app.state.database`;
  nothing here opens a connection at import time.
- `get_async_db` is the FastAPI dependency yielding a request-scoped session.
- SQLite URLs (tests/dev) get `PRAGMA foreign_keys=ON` so `ON DELETE CASCADE`
  behaves like Postgres; in-memory SQLite shares one connection via `StaticPool`.
"""

from typing import Any, AsyncGenerator, Dict, Optional
import logging
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from anistream.core.config import Settings

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_memory_sqlite(url: str) -> bool:
    return _is_sqlite(url) and (":memory:" in url or url.rstrip("/").endswith(":"))


def _engine_kwargs(url: str, settings: Optional[Settings]) -> Dict[str, Any]:
    if _is_sqlite(url):
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(url):
            kwargs["poolclass"] = StaticPool
        return kwargs
    if settings is None:
        return {"pool_pre_ping": True}
    return {
        "pool_pre_ping": True,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
    }


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ─────────────────────────────────────────────────────────────
# ⚡ Database handle
# ─────────────────────────────────────────────────────────────

class Database:
    """Async engine + session factory for one database URL."""

    def __init__(self, url: str, *, settings: Optional[Settings] = None, echo: bool = False) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, **_engine_kwargs(url, settings))
        if _is_sqlite(url):
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self.session_maker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, settings=settings, echo=settings.DB_ECHO)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Plain session; caller commits."""
        async with self.session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Session with an open transaction, committed on clean exit."""
        async with self.session_maker() as session:
            async with session.begin():
                yield session

    async def create_all(self) -> None:
        from anistream.db.base import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        from anistream.db.base import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def healthcheck(self) -> bool:
        """Quick SELECT 1 to verify DB connectivity (used by /readyz)."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.exception("DB healthcheck failed")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# ─────────────────────────────────────────────────────────────
# FastAPI dependency
# ─────────────────────────────────────────────────────────────

def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_async_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async SQLAlchemy session from the app's `Database`."""
    database: Database = request.app.state.database
    async with database.session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


__all__ = ["Database", "get_database", "get_async_db"]
