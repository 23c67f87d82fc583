from __future__ import annotations

"""
Self-service account endpoints (session owner only).

Routes
------
- PATCH  /user/profile   → `{username, email}` (both required) → updated user
- PATCH  /user/password  → `{currentPassword, newPassword}`; current must verify
- DELETE /user/account   → atomic delete of the account and everything it owns,
                           then the session cookie is cleared
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.api.routers.auth.session_auth import clear_session_cookie
from anistream.core.config import Settings
from anistream.core.exceptions import AppException, InternalError, NotFoundError
from anistream.db.models import User
from anistream.db.session import get_async_db
from anistream.dependencies.auth import get_current_user, get_settings
from anistream.schemas.common import MessageOut
from anistream.schemas.user import PasswordChangeIn, ProfileUpdateIn, UserOut
from anistream.security_headers import set_sensitive_cache
from anistream.services.accounts import change_password, delete_account, update_profile

log = logging.getLogger(__name__)

router = APIRouter(tags=["Account"])


@router.patch("/profile", response_model=UserOut, summary="Update username/email")
async def patch_profile(
    payload: ProfileUpdateIn,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> UserOut:
    set_sensitive_cache(response)
    try:
        user = await update_profile(db, user, username=payload.username, email=payload.email)
    except AppException:
        raise
    except Exception as e:
        log.exception("Failed to update profile user=%s", user.id)
        raise InternalError.from_exc("Failed to update profile", e)
    return UserOut.model_validate(user)


@router.patch("/password", response_model=MessageOut, summary="Change password")
async def patch_password(
    payload: PasswordChangeIn,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> MessageOut:
    set_sensitive_cache(response)
    try:
        await change_password(
            db, user, current_password=payload.current_password, new_password=payload.new_password
        )
    except AppException:
        raise
    except Exception as e:
        log.exception("Failed to update password user=%s", user.id)
        raise InternalError.from_exc("Failed to update password", e)
    return MessageOut(message="Password updated successfully")


@router.delete("/account", response_model=MessageOut, summary="Delete my account")
async def delete_my_account(
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings),
) -> MessageOut:
    set_sensitive_cache(response)
    user_id = user.id
    try:
        deleted = await delete_account(db, user_id)
    except Exception as e:
        log.exception("Failed to delete account user=%s", user_id)
        raise InternalError.from_exc("Failed to delete account", e)
    if not deleted:
        raise NotFoundError("User not found")
    clear_session_cookie(response, settings)
    return MessageOut(message="Account deleted successfully")


__all__ = ["router"]
