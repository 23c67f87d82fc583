# tests/fixtures/catalog.py

"""
🎬 Catalog fixtures: insert genres, animes, seasons, episodes and sources
straight through the ORM so API tests start from a known catalog.
"""

from typing import Iterable, Optional

import pytest

from anistream.db.models import Anime, Episode, Genre, Season, VideoSource
from anistream.db.session import Database
from anistream.schemas.enums import AnimeStatus, AnimeType


@pytest.fixture()
def create_genre(database: Database):
    async def _create(name: str) -> Genre:
        async with database.session() as session:
            genre = Genre(name=name)
            session.add(genre)
            await session.commit()
            await session.refresh(genre)
            return genre

    return _create


@pytest.fixture()
def create_anime(database: Database):
    async def _create(
        title: str,
        *,
        type: AnimeType = AnimeType.TV,
        status: AnimeStatus = AnimeStatus.ONGOING,
        release_year: Optional[int] = None,
        rating: Optional[float] = None,
        genre_ids: Iterable[int] = (),
        featured: bool = False,
    ) -> Anime:
        async with database.session() as session:
            anime = Anime(
                title=title,
                type=type,
                status=status,
                release_year=release_year,
                rating=rating,
                featured=featured,
            )
            anime.genres = [await session.get(Genre, gid) for gid in genre_ids]
            session.add(anime)
            await session.commit()
            return anime

    return _create


@pytest.fixture()
def create_season(database: Database):
    async def _create(anime_id: int, number: int = 1, title: Optional[str] = None) -> Season:
        async with database.session() as session:
            season = Season(anime_id=anime_id, number=number, title=title)
            session.add(season)
            await session.commit()
            await session.refresh(season)
            return season

    return _create


@pytest.fixture()
def create_episode(database: Database):
    async def _create(season_id: int, number: int = 1, title: Optional[str] = None, duration: str = "24m") -> Episode:
        async with database.session() as session:
            episode = Episode(season_id=season_id, number=number, title=title or f"Episode {number}", duration=duration)
            session.add(episode)
            await session.commit()
            await session.refresh(episode)
            return episode

    return _create


@pytest.fixture()
def create_video_source(database: Database):
    async def _create(episode_id: int, quality: str = "720p", url: str = "https://cdn.example.com/v.m3u8") -> VideoSource:
        async with database.session() as session:
            source = VideoSource(episode_id=episode_id, quality=quality, url=url, is_downloadable=True)
            session.add(source)
            await session.commit()
            await session.refresh(source)
            return source

    return _create


@pytest.fixture()
async def episode(create_anime, create_season, create_episode) -> Episode:
    """One anime → season 1 → episode 1."""
    anime = await create_anime("Cowboy Bebop", release_year=1998, status=AnimeStatus.COMPLETED)
    season = await create_season(anime.id, 1)
    return await create_episode(season.id, 1, "Asteroid Blues")


__all__ = [
    "create_genre",
    "create_anime",
    "create_season",
    "create_episode",
    "create_video_source",
    "episode",
]
