from __future__ import annotations

"""
Public: seasons, episodes and video sources (read-only).

Routes
------
- GET /animes/{anime_id}/seasons
- GET /seasons?animeId=            (all seasons when omitted)
- GET /seasons/{season_id}/episodes
- GET /episodes/{episode_id}
- GET /episodes/{episode_id}/video-sources
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.exceptions import InternalError, NotFoundError
from anistream.db.models import Episode, Season, VideoSource
from anistream.db.session import get_async_db
from anistream.schemas.catalog import EpisodeOut, SeasonOut, VideoSourceOut
from anistream.services.catalog_query import parse_int

log = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])


async def _seasons(db: AsyncSession, anime_id: Optional[int]) -> List[SeasonOut]:
    stmt = select(Season).order_by(Season.anime_id, Season.number, Season.id)
    if anime_id is not None:
        stmt = stmt.where(Season.anime_id == anime_id)
    try:
        rows = (await db.execute(stmt)).scalars().all()
    except Exception as e:
        log.exception("Failed to fetch seasons")
        raise InternalError.from_exc("Failed to fetch seasons", e)
    return [SeasonOut.model_validate(s) for s in rows]


@router.get("/animes/{anime_id}/seasons", response_model=List[SeasonOut], summary="Seasons of an anime")
async def list_anime_seasons(anime_id: int, db: AsyncSession = Depends(get_async_db)) -> List[SeasonOut]:
    return await _seasons(db, anime_id)


@router.get("/seasons", response_model=List[SeasonOut], summary="List seasons")
async def list_seasons(
    anime_id: Optional[str] = Query(None, alias="animeId"),
    db: AsyncSession = Depends(get_async_db),
) -> List[SeasonOut]:
    return await _seasons(db, parse_int(anime_id))


@router.get("/seasons/{season_id}/episodes", response_model=List[EpisodeOut], summary="Episodes of a season")
async def list_season_episodes(season_id: int, db: AsyncSession = Depends(get_async_db)) -> List[EpisodeOut]:
    try:
        rows = (
            await db.execute(select(Episode).where(Episode.season_id == season_id).order_by(Episode.number, Episode.id))
        ).scalars().all()
    except Exception as e:
        log.exception("Failed to fetch episodes")
        raise InternalError.from_exc("Failed to fetch episodes", e)
    return [EpisodeOut.model_validate(ep) for ep in rows]


@router.get("/episodes/{episode_id}", response_model=EpisodeOut, summary="Get one episode")
async def get_episode(episode_id: int, db: AsyncSession = Depends(get_async_db)) -> EpisodeOut:
    episode = await db.get(Episode, episode_id)
    if episode is None:
        raise NotFoundError("Episode not found")
    return EpisodeOut.model_validate(episode)


@router.get(
    "/episodes/{episode_id}/video-sources",
    response_model=List[VideoSourceOut],
    summary="Video sources of an episode",
)
async def list_video_sources(episode_id: int, db: AsyncSession = Depends(get_async_db)) -> List[VideoSourceOut]:
    try:
        rows = (
            await db.execute(
                select(VideoSource).where(VideoSource.episode_id == episode_id).order_by(VideoSource.id)
            )
        ).scalars().all()
    except Exception as e:
        log.exception("Failed to fetch video sources")
        raise InternalError.from_exc("Failed to fetch video sources", e)
    return [VideoSourceOut.model_validate(v) for v in rows]


__all__ = ["router"]
