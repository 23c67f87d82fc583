from __future__ import annotations

"""
📚 AniStream: Per-user library rows
====================================

Relationship state owned by a `User`:

• `WatchlistEntry` / `FavoriteEntry`: user ↔ anime bookmarks. Composite PK
  `(user_id, anime_id)` so re-adding can never create a duplicate row.
• `WatchProgress`: resume point per (user, episode); upserted, unique pair.
• `Download`: append-only audit of download requests (quality + client IP).

Every foreign key cascades, so deleting a user or the referenced item removes
these rows with it.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import relationship

from anistream.db.base_class import Base, utcnow


class WatchlistEntry(Base):
    __tablename__ = "watchlist"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    anime_id = Column(Integer, ForeignKey("animes.id", ondelete="CASCADE"), primary_key=True, index=True)
    added_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (Index("ix_watchlist_user_added", "user_id", "added_at"),)

    anime = relationship("Anime", lazy="joined")


class FavoriteEntry(Base):
    __tablename__ = "favorites"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    anime_id = Column(Integer, ForeignKey("animes.id", ondelete="CASCADE"), primary_key=True, index=True)
    added_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (Index("ix_favorites_user_added", "user_id", "added_at"),)

    anime = relationship("Anime", lazy="joined")


class WatchProgress(Base):
    __tablename__ = "watch_progress"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    episode_id = Column(Integer, ForeignKey("episodes.id", ondelete="CASCADE"), nullable=False, index=True)
    progress = Column(Integer, nullable=False, default=0, server_default=text("0"), doc="seconds watched")
    completed = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "episode_id", name="uq_watch_progress_user_episode"),
        CheckConstraint("progress >= 0", name="progress_nonneg"),
    )


class Download(Base):
    __tablename__ = "downloads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    episode_id = Column(Integer, ForeignKey("episodes.id", ondelete="CASCADE"), nullable=False, index=True)
    quality = Column(String(32), nullable=False)
    ip_address = Column(String(64), nullable=True)
    completed = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    downloaded_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (Index("ix_downloads_user_downloaded", "user_id", "downloaded_at"),)
