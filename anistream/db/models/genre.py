from __future__ import annotations

"""
🏷️ AniStream: Genre
====================

Flat taxonomy linked to `Anime` through `anime_genres`. Names are unique.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String
from sqlalchemy.orm import relationship

from anistream.db.base_class import Base


class Genre(Base):
    __tablename__ = "genres"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(80), nullable=False, unique=True)

    __table_args__ = (
        CheckConstraint("length(trim(name)) > 0", name="name_not_blank"),
    )

    animes = relationship(
        "Anime",
        secondary="anime_genres",
        back_populates="genres",
        lazy="select",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Genre id={self.id} name={self.name}>"
