# anistream/core/config.py
from __future__ import annotations

"""
# AniStream: Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; Postgres in prod via `DATABASE_URL` or `POSTGRES_*`.
- CSV → list helpers for CORS origins.
- Bounded session lifetimes (cookie-backed server sessions).

## Usage
    from anistream.core.config import settings

`create_app(settings=...)` accepts an explicit instance, so tests build their own.
"""

import json
import logging
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _split_csv(v: str | None) -> list[str]:
    """Split a comma-separated string into a trimmed list (empty-safe)."""
    if not v:
        return []
    return [s.strip() for s in str(v).split(",") if s and s.strip()]


def _derive_async_url(url: str) -> str:
    """Convert a sync Postgres URL to an asyncpg URL if needed."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Sessions:
        - Opaque cookie tokens; only their hash is stored server-side.
        - `rememberMe` on login switches to the longer TTL.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "AniStream API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    DEBUG: bool = False
    ENABLE_DOCS: bool = True

    # ── Database ──────────────────────────────────────────────
    DATABASE_URL: Optional[str] = None
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("")
    POSTGRES_DB: str = "anistream"

    DB_ECHO: bool = False
    DB_POOL_SIZE: int = Field(10, ge=1, le=100)
    DB_MAX_OVERFLOW: int = Field(20, ge=0, le=200)
    DB_POOL_TIMEOUT: int = Field(30, ge=1, le=300)
    DB_POOL_RECYCLE: int = Field(1800, ge=30)

    # ── Sessions ──────────────────────────────────────────────
    SESSION_COOKIE_NAME: str = "sid"
    SESSION_TTL_SECONDS: int = Field(24 * 60 * 60, ge=60)
    SESSION_REMEMBER_TTL_SECONDS: int = Field(30 * 24 * 60 * 60, ge=60)
    SESSION_COOKIE_SECURE: bool = False
    SESSION_COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "lax"

    # ── CORS ─────────────────────────────────────────────────
    CORS_ORIGINS: Optional[str] = "http://localhost:5173"  # CSV or JSON list

    # ── Rate limiting ─────────────────────────────────────────
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATELIMIT_STORAGE_URI: str = "memory://"

    # ── Catalog ───────────────────────────────────────────────
    CATALOG_DEFAULT_LIMIT: int = Field(25, ge=1, le=500)
    AUTOCOMPLETE_DEFAULT_LIMIT: int = Field(5, ge=1, le=50)

    # ── Validators ────────────────────────────────────────────
    @field_validator("API_PREFIX")
    @classmethod
    def _normalize_prefix(cls, v: str) -> str:
        v = (v or "").strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    # ── Convenience ───────────────────────────────────────────
    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL (explicit `DATABASE_URL` wins over `POSTGRES_*`)."""
        if self.DATABASE_URL:
            return _derive_async_url(self.DATABASE_URL)
        pwd = self.POSTGRES_PASSWORD.get_secret_value()
        auth = f"{self.POSTGRES_USER}:{pwd}" if pwd else self.POSTGRES_USER
        return f"postgresql+asyncpg://{auth}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def cors_origins(self) -> List[str]:
        s = (self.CORS_ORIGINS or "").strip()
        if s.startswith("["):
            return [str(o).strip() for o in json.loads(s) if str(o).strip()]
        return _split_csv(s)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()

__all__ = ["Settings", "settings"]
