from __future__ import annotations

"""Playable/downloadable rendition of an `Episode` (quality label + URL)."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, text
from sqlalchemy.orm import relationship

from anistream.db.base_class import Base


class VideoSource(Base):
    __tablename__ = "video_sources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    episode_id = Column(Integer, ForeignKey("episodes.id", ondelete="CASCADE"), nullable=False, index=True)
    quality = Column(String(32), nullable=False, doc="e.g. 480p, 720p, 1080p")
    url = Column(String(2048), nullable=False)
    is_downloadable = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    episode = relationship("Episode", back_populates="video_sources", lazy="raise")
