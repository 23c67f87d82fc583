# anistream/services/accounts.py
from __future__ import annotations

"""
👤 AniStream: Account lifecycle
================================

Registration, credential checks, profile/password changes and deletion.

Deletion removes every row the user owns (sessions, watchlist, favorites,
watch progress, downloads) and then the user inside **one transaction**: either
everything goes or nothing does. The explicit deletes mirror the FK cascades
so behaviour does not depend on the backend enforcing `ON DELETE CASCADE`.
"""

from typing import Optional

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.exceptions import ConflictError, ValidationError
from anistream.core.security import compare_passwords_async, hash_password_async
from anistream.db.models import Download, FavoriteEntry, User, UserSession, WatchlistEntry, WatchProgress
from anistream.schemas.enums import UserRole, UserStatus
from anistream.schemas.user import MIN_PASSWORD_LENGTH, RegisterIn

_OWNED_TABLES = (UserSession, WatchlistEntry, FavoriteEntry, WatchProgress, Download)


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    return await db.scalar(select(User).where(User.username == username))


async def _email_taken(db: AsyncSession, email: str, *, exclude_id: Optional[int] = None) -> bool:
    stmt = select(User.id).where(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return (await db.scalar(stmt)) is not None


async def _username_taken(db: AsyncSession, username: str, *, exclude_id: Optional[int] = None) -> bool:
    stmt = select(User.id).where(User.username == username)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return (await db.scalar(stmt)) is not None


async def register_user(db: AsyncSession, payload: RegisterIn) -> User:
    if await _username_taken(db, payload.username):
        raise ConflictError("Username already exists")
    if await _email_taken(db, str(payload.email)):
        raise ConflictError("Email already exists")
    user = User(
        username=payload.username,
        email=str(payload.email),
        password=await hash_password_async(payload.password),
        role=UserRole.USER,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("[Accounts] registered | user_id={}", user.id)
    return user


async def authenticate(db: AsyncSession, username: str, password: str) -> Optional[User]:
    """Return the user when the password matches, else None (unknown users cost a hash too)."""
    user = await get_user_by_username(db, username)
    if user is None:
        await hash_password_async(password)
        return None
    if not await compare_passwords_async(password, user.password):
        return None
    return user


async def update_profile(db: AsyncSession, user: User, *, username: Optional[str], email: Optional[str]) -> User:
    username = (username or "").strip()
    email = (email or "").strip()
    if not username or not email:
        raise ValidationError("Username and email are required")
    if "@" not in email:
        raise ValidationError.for_field("email", "Invalid email address", "Invalid email address")
    if await _username_taken(db, username, exclude_id=user.id):
        raise ConflictError("Username already exists")
    if await _email_taken(db, email, exclude_id=user.id):
        raise ConflictError("Email already exists")
    user.username = username
    user.email = email
    await db.commit()
    await db.refresh(user)
    return user


async def change_password(
    db: AsyncSession,
    user: User,
    *,
    current_password: Optional[str],
    new_password: Optional[str],
) -> None:
    if not current_password or not new_password:
        raise ValidationError("Current password and new password are required")
    if not await compare_passwords_async(current_password, user.password):
        raise ValidationError("Current password is incorrect")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError.for_field(
            "newPassword", "Password must be at least 6 characters", "Password must be at least 6 characters"
        )
    user.password = await hash_password_async(new_password)
    await db.commit()
    logger.info("[Accounts] password changed | user_id={}", user.id)


async def delete_account(db: AsyncSession, user_id: int) -> bool:
    """Atomically delete a user and everything they own. Returns False if the user did not exist."""
    try:
        for model in _OWNED_TABLES:
            await db.execute(delete(model).where(model.user_id == user_id))
        result = await db.execute(delete(User).where(User.id == user_id))
        if not result.rowcount:
            await db.rollback()
            return False
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("[Accounts] deleted | user_id={}", user_id)
    return True


__all__ = [
    "get_user_by_username",
    "register_user",
    "authenticate",
    "update_profile",
    "change_password",
    "delete_account",
]
