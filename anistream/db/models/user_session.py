from __future__ import annotations

"""
🎟️ AniStream: UserSession (server-side login session)
======================================================

One row per signed-in browser. The cookie carries an opaque random token; only
its SHA-256 hex digest is stored here, mirroring how refresh tokens are kept.

• `expires_at` is absolute; validity is checked in SQL (`expires_at > now`).
• `last_active` is refreshed whenever the session authenticates a request.
• `ip_address` / `device_info` are informational (admin session listing).
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import relationship

from anistream.db.base_class import Base, utcnow


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    token_hash = Column(String(64), nullable=False, unique=True, doc="sha256 hex of the cookie token")

    ip_address = Column(String(64), nullable=True)
    device_info = Column(String(512), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    last_active = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        Index("ix_user_sessions_user_last_active", "user_id", "last_active"),
        Index("ix_user_sessions_expires_at", "expires_at"),
    )

    user = relationship("User", back_populates="sessions", lazy="joined")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<UserSession id={self.id} user_id={self.user_id} expires_at={self.expires_at}>"
