# anistream/dependencies/auth.py
from __future__ import annotations

"""
Access gate dependencies
------------------------
Turns the session cookie into a typed `Identity` and enforces the capability an
endpoint needs. Keep every auth decision here so routers only declare intent.

Exports
- get_settings(request): the app's `Settings`
- get_optional_identity: `Identity | None` from the session cookie
- require_authenticated: 401 `Unauthorized` without a valid session
- require_admin: 401 without a session, 403 `Forbidden` when role != Admin
- get_current_user: the caller's `User` row (for self-service mutations)
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.config import Settings
from anistream.core.exceptions import AuthError, ForbiddenError
from anistream.db.models import User
from anistream.db.session import get_async_db
from anistream.services.sessions import Identity, resolve_session


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_token(request: Request) -> Optional[str]:
    settings: Settings = request.app.state.settings
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


async def get_optional_identity(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
) -> Optional[Identity]:
    identity = await resolve_session(db, get_session_token(request))
    if identity is not None:
        request.state.identity = identity
    return identity


async def require_authenticated(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
    if identity is None:
        raise AuthError()
    return identity


async def require_admin(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
    if identity is None:
        raise AuthError()
    if not identity.is_admin:
        raise ForbiddenError()
    return identity


async def get_current_user(
    identity: Identity = Depends(require_authenticated),
    db: AsyncSession = Depends(get_async_db),
) -> User:
    user = await db.get(User, identity.id)
    if user is None:
        raise AuthError()
    return user


__all__ = [
    "get_settings",
    "get_session_token",
    "get_optional_identity",
    "require_authenticated",
    "require_admin",
    "get_current_user",
]
