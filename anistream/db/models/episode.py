from __future__ import annotations

"""
📺 AniStream: Episode
======================

Belongs to a `Season`. `duration` is display text and required; `number` orders
episodes inside a season (duplicates are tolerated for specials/recaps).
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from anistream.db.base_class import Base


class Episode(Base):
    __tablename__ = "episodes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(String(64), nullable=False)
    thumbnail = Column(String(1024), nullable=True)

    __table_args__ = (
        CheckConstraint("number >= 0", name="number_nonneg"),
        Index("ix_episodes_season_number", "season_id", "number"),
    )

    season = relationship("Season", back_populates="episodes", lazy="raise")
    video_sources = relationship("VideoSource", back_populates="episode", lazy="raise", passive_deletes=True)
