from __future__ import annotations

"""Season of an `Anime`; `(anime_id, number)` is unique."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from anistream.db.base_class import Base


class Season(Base):
    __tablename__ = "seasons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    anime_id = Column(Integer, ForeignKey("animes.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=True)

    __table_args__ = (
        UniqueConstraint("anime_id", "number", name="uq_seasons_anime_number"),
        CheckConstraint("number >= 0", name="number_nonneg"),
    )

    anime = relationship("Anime", back_populates="seasons", lazy="raise")
    episodes = relationship("Episode", back_populates="season", lazy="raise", passive_deletes=True)
