# anistream/middleware/request_id.py
from __future__ import annotations

"""
Per-request correlation id (pure ASGI).

An incoming `X-Request-ID` (or `X-Correlation-ID`) is kept when it is a short
token of `[A-Za-z0-9._-]`; anything else is replaced by a fresh UUIDv4. The id
lands on `request.state.request_id`, on the response header, and in the loguru
context as `request_id` while the request runs.
"""

import os
import re
import uuid
from typing import Iterable, List, Tuple

from loguru import logger
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

HEADER_NAME = os.getenv("REQUEST_ID_HEADER_NAME", "X-Request-ID")
MAX_ID_LENGTH = int(os.getenv("REQUEST_ID_MAX_LENGTH", "128"))

_TOKEN = re.compile(r"[A-Za-z0-9._-]+")


def _accept_client_id(value: str | None) -> str | None:
    value = (value or "").strip()
    if value and len(value) <= MAX_ID_LENGTH and _TOKEN.fullmatch(value):
        return value
    return None


def _with_header(raw: Iterable[Tuple[bytes, bytes]], name: bytes, value: bytes) -> List[Tuple[bytes, bytes]]:
    lowered = name.lower()
    headers = [(k, v) for k, v in raw if k.lower() != lowered]
    headers.append((name, value))
    return headers


class RequestIDMiddleware:
    def __init__(self, app: ASGIApp, header_name: str = HEADER_NAME) -> None:
        self.app = app
        self.header_name = header_name
        self._header_bytes = header_name.encode("latin-1")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        request_id = (
            _accept_client_id(headers.get(self.header_name))
            or _accept_client_id(headers.get("X-Correlation-ID"))
            or str(uuid.uuid4())
        )
        scope.setdefault("state", {})["request_id"] = request_id
        encoded = request_id.encode("latin-1")

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = _with_header(message.get("headers", []), self._header_bytes, encoded)
            await send(message)

        with logger.contextualize(request_id=request_id):
            await self.app(scope, receive, send_with_id)


def get_request_id(request) -> str:
    """Request id stored by the middleware, or "" outside of one."""
    state = getattr(request, "state", None)
    return getattr(state, "request_id", "") or ""


__all__ = ["RequestIDMiddleware", "get_request_id"]
