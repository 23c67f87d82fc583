from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from anistream.schemas.common import CamelModel
from anistream.schemas.enums import UserRole, UserStatus

MIN_PASSWORD_LENGTH = 6


class UserOut(CamelModel):
    """Public view of an account. Carries no password field."""

    id: int
    username: str
    email: str
    role: UserRole
    status: UserStatus
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None


class UserAdminUpdate(CamelModel):
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None


class SessionOut(CamelModel):
    id: int
    user_id: int
    ip_address: Optional[str] = None
    device_info: Optional[str] = None
    created_at: datetime
    last_active: datetime
    expires_at: datetime


# ── Auth payloads ──────────────────────────────────────────────
class RegisterIn(CamelModel):
    username: str = Field(..., min_length=3, max_length=64)
    email: EmailStr
    password: str = Field(..., max_length=256)
    confirm_password: str

    @field_validator("username")
    @classmethod
    def _strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        return v

    @field_validator("password")
    @classmethod
    def _password_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError("Password must be at least 6 characters")
        return v

    @model_validator(mode="after")
    def _passwords_match(self) -> "RegisterIn":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class LoginIn(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    remember_me: bool = False


# ── Self-service account ───────────────────────────────────────
class ProfileUpdateIn(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None


class PasswordChangeIn(CamelModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None
