# anistream/services/sessions.py
from __future__ import annotations

"""
🎟️ AniStream: Server-side login sessions
=========================================

Flow
----
- `open_session` mints an opaque token, stores `sha256(token)` with device/IP
  metadata and an absolute expiry, and returns the raw token for the cookie.
- `resolve_session` maps a raw cookie token to a typed `Identity`. The row must
  exist, be unexpired (checked in SQL) and belong to an **Active** user.
  `last_active` is refreshed on success.
- `close_session` / `revoke_user_sessions` delete rows (logout, blocking, deletion).
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.security import generate_session_token, hash_session_token
from anistream.db.base_class import utcnow
from anistream.db.models import User, UserSession
from anistream.schemas.enums import UserRole, UserStatus

_DEVICE_INFO_MAX = 512


@dataclass(frozen=True)
class Identity:
    """Verified caller produced by the access gate; handlers never see raw session rows."""

    id: int
    username: str
    email: str
    role: UserRole
    status: UserStatus
    session_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_user(cls, user: User, session_id: Optional[int] = None) -> "Identity":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=UserRole(user.role),
            status=UserStatus(user.status),
            session_id=session_id,
        )


async def open_session(
    db: AsyncSession,
    user: User,
    *,
    ttl_seconds: int,
    ip_address: Optional[str] = None,
    device_info: Optional[str] = None,
) -> str:
    """Persist a new session for `user` and return the raw cookie token."""
    token = generate_session_token()
    now = utcnow()
    db.add(
        UserSession(
            user_id=user.id,
            token_hash=hash_session_token(token),
            ip_address=ip_address,
            device_info=(device_info or "")[:_DEVICE_INFO_MAX] or None,
            created_at=now,
            last_active=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
    )
    await db.commit()
    logger.info("[Session] opened | user_id={} | ttl={}s", user.id, ttl_seconds)
    return token


async def resolve_session(db: AsyncSession, token: Optional[str]) -> Optional[Identity]:
    if not token:
        return None
    now = utcnow()
    row = (
        await db.execute(
            select(UserSession.id, User)
            .join(User, User.id == UserSession.user_id)
            .where(
                UserSession.token_hash == hash_session_token(token),
                UserSession.expires_at > now,
            )
        )
    ).first()
    if row is None:
        return None
    session_id, user = row
    if user.status != UserStatus.ACTIVE:
        return None
    await db.execute(update(UserSession).where(UserSession.id == session_id).values(last_active=now))
    await db.commit()
    return Identity.from_user(user, session_id=session_id)


async def close_session(db: AsyncSession, token: Optional[str]) -> None:
    if not token:
        return
    await db.execute(delete(UserSession).where(UserSession.token_hash == hash_session_token(token)))
    await db.commit()


async def revoke_user_sessions(db: AsyncSession, user_id: int, *, commit: bool = True) -> None:
    await db.execute(delete(UserSession).where(UserSession.user_id == user_id))
    if commit:
        await db.commit()


__all__ = ["Identity", "open_session", "resolve_session", "close_session", "revoke_user_sessions"]
