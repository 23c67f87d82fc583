# anistream/main.py
from __future__ import annotations

"""
# AniStream API: Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the anime catalog + account backend.

## Design Goals
- Deterministic, testable **app factory** (`create_app(settings, database)`):
  the database handle is constructed here (or injected by tests) and stored on
  `app.state.database`; nothing opens connections at import time.
- Explicit **middleware chain** (outermost first):
  request id → security headers → CORS → gzip → rate limits → strip `Server`.
- Centralized exception handling: every error is `{message, error?}`.

## Probes
- `/healthz`: liveness (process up).
- `/readyz`: readiness (quick DB check).

Run locally:
    uvicorn anistream.main:app --reload
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional
import logging

from fastapi import FastAPI, Request
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse, Response

from anistream.core import logger as _logsetup  # noqa: F401  (installs loguru sinks)
from anistream.core.config import Settings, settings as default_settings
from anistream.core.exception_handlers import register_exception_handlers
from anistream.core.limiter import install_rate_limiter
from anistream.db.session import Database
from anistream.middleware.request_id import RequestIDMiddleware
from anistream.security_headers import SecurityHeadersMiddleware, configure_cors

logger = logging.getLogger("anistream")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("✅ AniStream API starting up (env=%s)", app.state.settings.ENVIRONMENT)
    try:
        yield
    finally:
        database: Database = app.state.database
        if app.state.owns_database:
            try:
                await database.dispose()
                logger.info("🛑 Database engine disposed")
            except Exception:
                logger.exception("Error disposing DB engine")
        logger.info("🛑 AniStream API shutting down")


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Args:
        settings: configuration; defaults to the environment-loaded singleton.
        database: pre-built handle (tests pass an in-memory SQLite one). When
            omitted, one is built from `settings` and disposed on shutdown.
    """
    settings = settings or default_settings
    docs = settings.ENABLE_DOCS

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.owns_database = database is None
    app.state.database = database or Database.from_settings(settings)

    # ── Middlewares (each add wraps the previous; last added runs first) ───
    @app.middleware("http")
    async def _strip_server_header(request: Request, call_next: Callable) -> Response:
        response: Response = await call_next(request)
        if "server" in response.headers:
            del response.headers["server"]
        return response

    install_rate_limiter(app, settings)
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    configure_cors(app, settings.cors_origins)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routers ─────────────────────────────────────────────────────────────
    from anistream.api.routers import build_api_router

    app.include_router(build_api_router(), prefix=settings.API_PREFIX)

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/readyz", tags=["meta"])
    async def readyz(request: Request) -> JSONResponse:
        ok = await request.app.state.database.healthcheck()
        return JSONResponse(
            status_code=200 if ok else 503,
            content={"status": "ready" if ok else "degraded", "db": "ok" if ok else "down"},
        )

    return app


app = create_app()
