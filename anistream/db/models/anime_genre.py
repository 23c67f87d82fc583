from __future__ import annotations

"""
🔗 AniStream: Anime ⇄ Genre association
========================================

Mapped association row. Composite primary key `(anime_id, genre_id)` makes each
pair unique; both foreign keys cascade so deleting either side cleans up links.
`Anime.genres` / `Genre.animes` use it through `secondary="anime_genres"`.
"""

from sqlalchemy import Column, ForeignKey, Integer

from anistream.db.base_class import Base


class AnimeGenre(Base):
    __tablename__ = "anime_genres"

    anime_id = Column(Integer, ForeignKey("animes.id", ondelete="CASCADE"), primary_key=True)
    genre_id = Column(Integer, ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True, index=True)
