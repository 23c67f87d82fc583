from __future__ import annotations

"""
AniStream: HTTP Rate Limiting (SlowAPI)
========================================

Highlights
----------
- **Per-client keying**: the first `X-Forwarded-For` hop, then `X-Real-IP`,
  then the socket peer. The key is computed by the middleware before any
  route dependency runs, so it never depends on the session.
- **Exemptions**: health/docs paths and configurable trusted IPs bypass the
  limiter entirely (`ExemptingSlowAPIMiddleware`).
- **Test friendly**: `RATE_LIMIT_ENABLED=false` skips the middleware entirely.
- **Backends**: `RATELIMIT_STORAGE_URI` (memory:// by default, redis:// works too).

Usage
-----
    from anistream.core.limiter import install_rate_limiter

    app = FastAPI()
    install_rate_limiter(app, settings)
"""

import os
from typing import List, Optional, Set

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.middleware.base import RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from anistream.core.config import Settings

SKIP_PATHS: List[str] = [
    p.strip()
    for p in os.getenv("RATE_LIMIT_SKIP_PATHS", "/healthz,/readyz,/docs,/openapi.json,/favicon.ico").split(",")
    if p.strip()
]
TRUSTED_IPS: Set[str] = {ip.strip() for ip in os.getenv("RATE_LIMIT_TRUSTED_IPS", "").split(",") if ip.strip()}


# ──────────────────────────────────────────────────────────────
# 🧠 Keying & exemptions
# ──────────────────────────────────────────────────────────────
def client_ip(request: Request) -> str:
    """
    Best-effort client IP:
    1) X-Forwarded-For (first hop)
    2) X-Real-IP
    3) ASGI client.host
    """
    xff = request.headers.get("x-forwarded-for")
    if xff:
        ip = xff.split(",")[0].strip()
        if ip:
            return ip
    xri = request.headers.get("x-real-ip")
    if xri and xri.strip():
        return xri.strip()
    return get_remote_address(request) or "unknown"


def get_rate_limit_key(request: Request) -> str:
    return f"ip:{client_ip(request)}"


def _path_is_skipped(path: str) -> bool:
    return any(path == p or path.startswith(p.rstrip("/") + "/") for p in SKIP_PATHS)


def should_exempt_request(request: Request) -> bool:
    if _path_is_skipped(request.url.path):
        return True
    return client_ip(request) in TRUSTED_IPS


# ──────────────────────────────────────────────────────────────
# 🧰 Limiter instance
# ──────────────────────────────────────────────────────────────
def build_limiter(settings: Settings) -> Limiter:
    defaults = [chunk.strip() for chunk in settings.RATE_LIMIT_DEFAULT.split(",") if chunk.strip()]
    return Limiter(
        key_func=get_rate_limit_key,
        default_limits=defaults,
        storage_uri=settings.RATELIMIT_STORAGE_URI or "memory://",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


class ExemptingSlowAPIMiddleware(SlowAPIMiddleware):
    """`SlowAPIMiddleware` that lets skipped paths and trusted IPs straight through."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if should_exempt_request(request):
            return await call_next(request)
        return await super().dispatch(request, call_next)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("[RateLimit] exceeded | key={} | limit={}", get_rate_limit_key(request), exc.detail)
    return JSONResponse(status_code=429, content={"message": "Too many requests", "error": str(exc.detail)})


# ──────────────────────────────────────────────────────────────
# 🔧 Installer
# ──────────────────────────────────────────────────────────────
def install_rate_limiter(app: FastAPI, settings: Settings) -> Optional[Limiter]:
    """Attach SlowAPI middleware; not installed at all when disabled."""
    if not settings.RATE_LIMIT_ENABLED:
        logger.info("RateLimiter disabled by settings; middleware not installed")
        return None

    limiter = build_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(ExemptingSlowAPIMiddleware)
    logger.info("✅ RateLimiter ready | default={} | skip={}", settings.RATE_LIMIT_DEFAULT, SKIP_PATHS)
    return limiter


__all__ = [
    "client_ip",
    "get_rate_limit_key",
    "should_exempt_request",
    "build_limiter",
    "ExemptingSlowAPIMiddleware",
    "rate_limit_exceeded_handler",
    "install_rate_limiter",
]
