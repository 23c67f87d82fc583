from __future__ import annotations

"""
🔐 AniStream: Cookie session authentication
============================================

Routes
------
- POST /register  → 201 user; starts a session (cookie)
- POST /login     → 200 user; `rememberMe` picks the long session TTL
- POST /logout    → 200; deletes the server session and clears the cookie
- GET  /user      → current user or 401

Security
--------
- Wrong username and wrong password give the same 401 message.
- Blocked accounts cannot log in (403).
- All responses are `no-store`.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.config import Settings
from anistream.core.exceptions import AuthError, ForbiddenError
from anistream.core.limiter import client_ip
from anistream.db.models import User
from anistream.db.session import get_async_db
from anistream.dependencies.auth import get_current_user, get_session_token, get_settings
from anistream.schemas.common import MessageOut
from anistream.schemas.enums import UserStatus
from anistream.schemas.user import LoginIn, RegisterIn, UserOut
from anistream.security_headers import set_sensitive_cache
from anistream.services.accounts import authenticate, register_user
from anistream.services.sessions import close_session, open_session

log = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


# ─────────────────────────────────────────────────────────────
# Cookie helpers
# ─────────────────────────────────────────────────────────────
def set_session_cookie(response: Response, settings: Settings, token: str, *, max_age: int) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_COOKIE_SAMESITE,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite=settings.SESSION_COOKIE_SAMESITE,
    )


async def _start_session(
    request: Request, response: Response, db: AsyncSession, settings: Settings, user: User, *, remember: bool
) -> None:
    ttl = settings.SESSION_REMEMBER_TTL_SECONDS if remember else settings.SESSION_TTL_SECONDS
    token = await open_session(
        db,
        user,
        ttl_seconds=ttl,
        ip_address=client_ip(request),
        device_info=request.headers.get("user-agent"),
    )
    set_session_cookie(response, settings, token, max_age=ttl)


# ─────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────
@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED, summary="Create an account")
async def register(
    payload: RegisterIn,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings),
) -> UserOut:
    set_sensitive_cache(response)
    user = await register_user(db, payload)
    await _start_session(request, response, db, settings, user, remember=False)
    return UserOut.model_validate(user)


@router.post("/login", response_model=UserOut, summary="Log in")
async def login(
    payload: LoginIn,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings),
) -> UserOut:
    set_sensitive_cache(response)
    user = await authenticate(db, payload.username, payload.password)
    if user is None:
        log.info("Login failed for username=%r", payload.username)
        raise AuthError("Invalid username or password")
    if user.status == UserStatus.BLOCKED:
        raise ForbiddenError("Account is blocked")
    await _start_session(request, response, db, settings, user, remember=payload.remember_me)
    return UserOut.model_validate(user)


@router.post("/logout", response_model=MessageOut, summary="Log out")
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings),
) -> MessageOut:
    set_sensitive_cache(response)
    await close_session(db, get_session_token(request))
    clear_session_cookie(response, settings)
    return MessageOut(message="Logged out")


@router.get("/user", response_model=UserOut, summary="Current user")
async def current_user(response: Response, user: User = Depends(get_current_user)) -> UserOut:
    set_sensitive_cache(response)
    return UserOut.model_validate(user)


__all__ = ["router", "set_session_cookie", "clear_session_cookie"]
