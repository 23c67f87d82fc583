from __future__ import annotations

"""
👥 Admin: user & session management
===================================

Routes (Admin session required)
-------------------------------
- GET    /users                      → all accounts (no password digests)
- PATCH  /users/{user_id}            → change role and/or status; blocking revokes sessions
- DELETE /users/{user_id}            → 204; refuses the caller's own id (use DELETE /user/account)
- GET    /user-sessions?userId=      → sessions of a user (defaults to the caller)
- DELETE /user-sessions/{session_id} → 204
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.exceptions import InternalError, NotFoundError, ValidationError
from anistream.db.models import User, UserSession
from anistream.db.session import get_async_db
from anistream.dependencies.auth import require_admin
from anistream.schemas.enums import UserStatus
from anistream.schemas.user import SessionOut, UserAdminUpdate, UserOut
from anistream.security_headers import set_sensitive_cache
from anistream.services.accounts import delete_account
from anistream.services.catalog_query import parse_int
from anistream.services.sessions import Identity, revoke_user_sessions

log = logging.getLogger(__name__)

router = APIRouter(tags=["Admin Users"])


@router.get("/users", response_model=List[UserOut], summary="List users")
async def list_users(
    request: Request,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
) -> List[UserOut]:
    set_sensitive_cache(request)
    try:
        rows = (await db.execute(select(User).order_by(User.id))).scalars().all()
    except Exception as e:
        log.exception("Failed to fetch users")
        raise InternalError.from_exc("Failed to fetch users", e)
    return [UserOut.model_validate(u) for u in rows]


@router.patch("/users/{user_id}", response_model=UserOut, summary="Update role/status")
async def update_user(
    user_id: int,
    payload: UserAdminUpdate,
    request: Request,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
) -> UserOut:
    set_sensitive_cache(request)
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if payload.role is not None:
        user.role = payload.role
    if payload.status is not None:
        user.status = payload.status
    try:
        if payload.status == UserStatus.BLOCKED:
            await revoke_user_sessions(db, user.id, commit=False)
        await db.commit()
        await db.refresh(user)
    except Exception as e:
        await db.rollback()
        log.exception("Failed to update user id=%s", user_id)
        raise InternalError.from_exc("Failed to update user", e)
    log.info("User updated id=%s role=%s status=%s by admin=%s", user.id, user.role, user.status, admin.id)
    return UserOut.model_validate(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete user")
async def delete_user(
    user_id: int,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
) -> Response:
    if user_id == admin.id:
        raise ValidationError("Cannot delete your own account")
    try:
        deleted = await delete_account(db, user_id)
    except Exception as e:
        log.exception("Failed to delete user id=%s", user_id)
        raise InternalError.from_exc("Failed to delete user", e)
    if not deleted:
        raise NotFoundError("User not found")
    log.info("User deleted id=%s by admin=%s", user_id, admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/user-sessions", response_model=List[SessionOut], summary="List a user's sessions")
async def list_user_sessions(
    request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
) -> List[SessionOut]:
    set_sensitive_cache(request)
    target = parse_int(user_id)
    target = admin.id if target is None else target
    rows = (
        await db.execute(
            select(UserSession).where(UserSession.user_id == target).order_by(UserSession.last_active.desc())
        )
    ).scalars().all()
    return [SessionOut.model_validate(s) for s in rows]


@router.delete("/user-sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Revoke a session")
async def delete_user_session(
    session_id: int,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
) -> Response:
    result = await db.execute(delete(UserSession).where(UserSession.id == session_id))
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError("Session not found")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
