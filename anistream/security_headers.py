# anistream/security_headers.py
from __future__ import annotations

"""
🛡️ AniStream: Security headers, sensitive caching & CORS
=========================================================

- `SecurityHeadersMiddleware` (pure ASGI) appends hardening headers idempotently.
  HSTS is only sent on HTTPS requests.
- `set_sensitive_cache(response_or_request)` marks personal/auth responses
  `no-store` so shared caches never keep them.
- `configure_cors(app, origins)` installs an allow-list CORS policy with
  credentials (the session cookie) enabled.
"""

import os
from typing import Iterable, List, Optional, Tuple, Union

from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Receive, Scope, Send

HSTS_MAX_AGE = int(os.getenv("HSTS_MAX_AGE", "31536000"))
REFERRER_POLICY = os.getenv("REFERRER_POLICY", "strict-origin-when-cross-origin")
SKIP_PATHS = tuple(p.strip() for p in os.getenv("SECURITY_HEADERS_SKIP_PATHS", "/docs,/redoc").split(",") if p.strip())

_STATIC_HEADERS = (
    ("X-Content-Type-Options", "nosniff"),
    ("X-Frame-Options", "DENY"),
    ("Referrer-Policy", REFERRER_POLICY),
    ("Cross-Origin-Opener-Policy", "same-origin"),
    ("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'"),
)


def _has_header(raw_headers: List[Tuple[bytes, bytes]], name: str) -> bool:
    lname = name.lower().encode("latin-1")
    return any(h[0].lower() == lname for h in raw_headers)


def _ensure_header(raw_headers: List[Tuple[bytes, bytes]], name: str, value: str) -> None:
    if not _has_header(raw_headers, name):
        raw_headers.append((name.encode("latin-1"), value.encode("latin-1")))


class SecurityHeadersMiddleware:
    """Apply security headers on every response; honour the sensitive-cache flag on `request.state`."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        path = scope.get("path", "")
        is_skipped = any(path.startswith(prefix) for prefix in SKIP_PATHS)
        is_https = scope.get("scheme") == "https"
        state = scope.setdefault("state", {})

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                raw_headers: List[Tuple[bytes, bytes]] = message.setdefault("headers", [])  # type: ignore[assignment]
                if not is_skipped:
                    for name, value in _STATIC_HEADERS:
                        _ensure_header(raw_headers, name, value)
                    if is_https:
                        _ensure_header(raw_headers, "Strict-Transport-Security", f"max-age={HSTS_MAX_AGE}; includeSubDomains")
                if state.get("_sensitive_cache"):
                    _ensure_header(raw_headers, "Cache-Control", "no-store")
                    _ensure_header(raw_headers, "Pragma", "no-cache")
            await send(message)

        await self.app(scope, receive, send_wrapper)


def set_sensitive_cache(target: Union[Response, Request]) -> None:
    """
    Mark a **Response** or **Request** as not cacheable.

    - `Response`: headers are set immediately (idempotent).
    - `Request`: sets a flag read by the middleware at response start, which
      also covers error responses raised later in the handler.
    """
    if isinstance(target, Response):
        target.headers.setdefault("Cache-Control", "no-store")
        target.headers.setdefault("Pragma", "no-cache")
        return
    if isinstance(target, Request):
        target.state._sensitive_cache = True
        return
    raise TypeError("set_sensitive_cache expects a Response or Request")


def configure_cors(app, origins: Iterable[str], *, allow_methods: Optional[Iterable[str]] = None) -> None:
    """Install allow-list CORS (never '*', since credentials are enabled)."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o for o in origins if o and o != "*"],
        allow_credentials=True,
        allow_methods=list(allow_methods or ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]),
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=3600,
    )


__all__ = ["SecurityHeadersMiddleware", "set_sensitive_cache", "configure_cors"]
