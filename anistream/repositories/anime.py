from __future__ import annotations

"""Anime catalog repository.

Loads catalog snapshots for the query pipeline and performs anime/genre writes.
Equality filters (genre, year, status, type) are pushed into SQL; search,
relevance and explicit ordering stay in `anistream.services.catalog_query` so
the ordering rules are identical on every database collation.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.exceptions import ValidationError
from anistream.db.models import Anime, AnimeGenre, Genre
from anistream.schemas.anime import AnimeCreate, AnimeUpdate
from anistream.schemas.enums import AnimeStatus, AnimeType, enum_or_none
from anistream.services.catalog_query import CatalogQuery

_SCALAR_FIELDS = (
    "title",
    "description",
    "type",
    "status",
    "release_year",
    "rating",
    "duration",
    "cover_image",
    "banner_image",
    "featured",
)


class AnimeRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ── Reads ──────────────────────────────────────────────────
    async def snapshot(self, params: Optional[CatalogQuery] = None) -> List[Anime]:
        """
        Catalog rows in base order (title, then id) with genres loaded.

        With `params`, rows that cannot pass the attribute filters are excluded
        in SQL. A filter value that can never match (unknown status/type)
        returns an empty list without querying.
        """
        stmt = select(Anime).order_by(Anime.title, Anime.id)
        if params is not None:
            if params.status is not None:
                status = enum_or_none(AnimeStatus, params.status)
                if status is None:
                    return []
                stmt = stmt.where(Anime.status == status)
            if params.type is not None:
                kind = enum_or_none(AnimeType, params.type)
                if kind is None:
                    return []
                stmt = stmt.where(Anime.type == kind)
            if params.year is not None:
                stmt = stmt.where(Anime.release_year == params.year)
            if params.genre_id is not None:
                stmt = stmt.where(
                    Anime.id.in_(select(AnimeGenre.anime_id).where(AnimeGenre.genre_id == params.genre_id))
                )
        result = await self.db.execute(stmt)
        return list(result.scalars().unique().all())

    async def get(self, anime_id: int) -> Optional[Anime]:
        return await self.db.get(Anime, anime_id)

    async def exists(self, anime_id: int) -> bool:
        return (await self.db.scalar(select(Anime.id).where(Anime.id == anime_id))) is not None

    async def list_genres(self) -> List[Genre]:
        result = await self.db.execute(select(Genre).order_by(Genre.name, Genre.id))
        return list(result.scalars().all())

    # ── Writes ─────────────────────────────────────────────────
    async def _resolve_genres(self, genre_ids: Iterable[int]) -> List[Genre]:
        wanted = list(dict.fromkeys(genre_ids))
        if not wanted:
            return []
        rows = (await self.db.execute(select(Genre).where(Genre.id.in_(wanted)))).scalars().all()
        by_id: Dict[int, Genre] = {g.id: g for g in rows}
        missing = [gid for gid in wanted if gid not in by_id]
        if missing:
            raise ValidationError(
                "Validation failed",
                error={"genres": [f"Unknown genre id(s): {', '.join(str(m) for m in missing)}"]},
            )
        return [by_id[gid] for gid in wanted]

    async def create(self, payload: AnimeCreate) -> Anime:
        genres = await self._resolve_genres(payload.genres)
        anime = Anime(**{f: getattr(payload, f) for f in _SCALAR_FIELDS})
        anime.genres = genres
        self.db.add(anime)
        await self.db.commit()
        return await self._reload(anime.id)

    async def update(self, anime: Anime, payload: AnimeUpdate) -> Anime:
        changes = payload.model_dump(exclude_unset=True)
        genre_ids: Optional[Sequence[int]] = changes.pop("genres", None)
        for key, value in changes.items():
            if key in _SCALAR_FIELDS and not (value is None and key in {"title", "type", "status", "featured"}):
                setattr(anime, key, value)
        if genre_ids is not None:
            anime.genres = await self._resolve_genres(genre_ids)
        await self.db.commit()
        return await self._reload(anime.id)

    async def delete(self, anime: Anime) -> None:
        await self.db.execute(delete(Anime).where(Anime.id == anime.id))
        await self.db.commit()

    async def _reload(self, anime_id: int) -> Anime:
        result = await self.db.execute(
            select(Anime).where(Anime.id == anime_id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    # ── Genres ─────────────────────────────────────────────────
    async def genre_name_taken(self, name: str) -> bool:
        return (await self.db.scalar(select(Genre.id).where(Genre.name == name))) is not None

    async def create_genre(self, name: str) -> Genre:
        genre = Genre(name=name)
        self.db.add(genre)
        await self.db.commit()
        await self.db.refresh(genre)
        return genre

    async def delete_genre(self, genre_id: int) -> bool:
        result = await self.db.execute(delete(Genre).where(Genre.id == genre_id))
        await self.db.commit()
        return bool(result.rowcount)


def get_anime_repository(db: AsyncSession) -> AnimeRepository:
    return AnimeRepository(db)


__all__ = ["AnimeRepository", "get_anime_repository"]
