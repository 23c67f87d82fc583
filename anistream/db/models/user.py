from __future__ import annotations

"""
👤 AniStream: User account
===========================

Account row holding credentials and access level.

• `password` stores `"<hex digest>.<hex salt>"` (see `anistream.core.security`);
  it is never serialized by any response schema.
• `role` gates admin endpoints; `status=Blocked` disables login and sessions.
• Every owned row (sessions, watchlist, favorites, progress, downloads) references
  `users.id` with `ON DELETE CASCADE`.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Integer, String, func
from sqlalchemy.orm import relationship

from anistream.db.base_class import Base, utcnow
from anistream.schemas.enums import UserRole, UserStatus


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # ── Credentials ─────────────────────────────────────────────────────────
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False, doc="scrypt digest.salt (hex)")

    # ── Access ──────────────────────────────────────────────────────────────
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
        server_default=UserRole.USER.value,
    )
    status = Column(
        Enum(UserStatus, name="user_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserStatus.ACTIVE,
        server_default=UserStatus.ACTIVE.value,
    )

    # ── Profile ─────────────────────────────────────────────────────────────
    avatar = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        CheckConstraint("length(trim(username)) > 0", name="username_not_blank"),
        CheckConstraint("length(trim(email)) > 0", name="email_not_blank"),
    )

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id} username={self.username} role={self.role}>"
