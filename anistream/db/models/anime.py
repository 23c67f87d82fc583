from __future__ import annotations

"""
🎬 AniStream: Anime (catalog root)
===================================

A streamable title with metadata and a genre set.

Highlights
----------
• `genres` is derived from `anime_genres` and loaded with `selectin`; never stored inline.
• `rating` is NUMERIC(3,1), read back as float (one fractional digit, 0.0–10.0).
• `duration` is free text ("24 min per ep", "2h 10m").
• Seasons → episodes → video sources hang below with `ON DELETE CASCADE`.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Enum,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship

from anistream.db.base_class import Base, TimestampMixin
from anistream.schemas.enums import AnimeStatus, AnimeType


class Anime(TimestampMixin, Base):
    __tablename__ = "animes"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # ── Core metadata ───────────────────────────────────────────────────────
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    type = Column(
        Enum(AnimeType, name="anime_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    status = Column(
        Enum(AnimeStatus, name="anime_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    release_year = Column(Integer, nullable=True)
    rating = Column(Numeric(3, 1, asdecimal=False), nullable=True)
    duration = Column(String(64), nullable=True)

    # ── Artwork & curation ──────────────────────────────────────────────────
    cover_image = Column(String(1024), nullable=True)
    banner_image = Column(String(1024), nullable=True)
    featured = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        CheckConstraint("length(trim(title)) > 0", name="title_not_blank"),
        CheckConstraint("rating IS NULL OR (rating >= 0 AND rating <= 10)", name="rating_range"),
        CheckConstraint("release_year IS NULL OR (release_year BETWEEN 1900 AND 2100)", name="release_year_range"),
        Index("ix_animes_status_type", "status", "type"),
        Index("ix_animes_release_year", "release_year"),
    )

    # ── Relationships ───────────────────────────────────────────────────────
    genres = relationship(
        "Genre",
        secondary="anime_genres",
        back_populates="animes",
        order_by="Genre.name",
        lazy="selectin",
        passive_deletes=True,
    )
    seasons = relationship(
        "Season",
        back_populates="anime",
        order_by="Season.number",
        lazy="raise",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Anime id={self.id} title={self.title!r} status={self.status}>"
