from __future__ import annotations

"""
Admin: seasons, episodes and video sources

Create endpoints verify the parent exists first and answer 400 with the parent
id in `error` when it does not. Update/delete answer 404 for unknown ids.
"""

import logging
from typing import Any, Dict, Type, TypeVar

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.exceptions import InternalError, NotFoundError, ValidationError
from anistream.db.base_class import Base
from anistream.db.models import Anime, Episode, Season, VideoSource
from anistream.db.session import get_async_db
from anistream.dependencies.auth import require_admin
from anistream.schemas.catalog import (
    EpisodeCreate,
    EpisodeOut,
    EpisodeUpdate,
    SeasonCreate,
    SeasonOut,
    SeasonUpdate,
    VideoSourceCreate,
    VideoSourceOut,
    VideoSourceUpdate,
)

log = logging.getLogger(__name__)

router = APIRouter(tags=["Admin Catalog"], dependencies=[Depends(require_admin)])

M = TypeVar("M", bound=Base)


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────
async def _exists(db: AsyncSession, model: Type[Base], pk: int) -> bool:
    return (await db.scalar(select(model.id).where(model.id == pk))) is not None  # type: ignore[attr-defined]


async def _insert(db: AsyncSession, obj: M, what: str) -> M:
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ValidationError(f"Failed to create {what}", error=str(e.orig))
    except Exception as e:
        await db.rollback()
        log.exception("Failed to create %s", what)
        raise InternalError.from_exc(f"Failed to create {what}", e)
    await db.refresh(obj)
    return obj


async def _patch(db: AsyncSession, model: Type[M], pk: int, changes: Dict[str, Any], what: str) -> M:
    obj = await db.get(model, pk)
    if obj is None:
        raise NotFoundError(f"{what.capitalize()} not found")
    for key, value in changes.items():
        setattr(obj, key, value)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ValidationError(f"Failed to update {what}", error=str(e.orig))
    await db.refresh(obj)
    return obj


async def _delete(db: AsyncSession, model: Type[Base], pk: int, what: str) -> Response:
    result = await db.execute(delete(model).where(model.id == pk))  # type: ignore[attr-defined]
    if not result.rowcount:
        await db.rollback()
        raise NotFoundError(f"{what.capitalize()} not found")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _non_null(payload) -> Dict[str, Any]:
    """Fields the client sent, minus explicit nulls on required columns."""
    return {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k in _NULLABLE}


_NULLABLE = {"description", "thumbnail"}


# ─────────────────────────────────────────────────────────────
# Seasons
# ─────────────────────────────────────────────────────────────
@router.post("/seasons", response_model=SeasonOut, status_code=status.HTTP_201_CREATED, summary="Create season")
async def create_season(payload: SeasonCreate, db: AsyncSession = Depends(get_async_db)) -> SeasonOut:
    if not await _exists(db, Anime, payload.anime_id):
        raise ValidationError("Failed to create season", error=f"Anime with ID {payload.anime_id} does not exist")
    season = await _insert(db, Season(**payload.model_dump()), "season")
    return SeasonOut.model_validate(season)


@router.put("/seasons/{season_id}", response_model=SeasonOut, summary="Update season")
async def update_season(season_id: int, payload: SeasonUpdate, db: AsyncSession = Depends(get_async_db)) -> SeasonOut:
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("number", 0) is None:
        changes.pop("number")
    season = await _patch(db, Season, season_id, changes, "season")
    return SeasonOut.model_validate(season)


@router.delete("/seasons/{season_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete season")
async def delete_season(season_id: int, db: AsyncSession = Depends(get_async_db)) -> Response:
    return await _delete(db, Season, season_id, "season")


# ─────────────────────────────────────────────────────────────
# Episodes
# ─────────────────────────────────────────────────────────────
@router.post("/episodes", response_model=EpisodeOut, status_code=status.HTTP_201_CREATED, summary="Create episode")
async def create_episode(payload: EpisodeCreate, db: AsyncSession = Depends(get_async_db)) -> EpisodeOut:
    if not await _exists(db, Season, payload.season_id):
        raise ValidationError("Failed to create episode", error=f"Season with ID {payload.season_id} does not exist")
    episode = await _insert(db, Episode(**payload.model_dump()), "episode")
    return EpisodeOut.model_validate(episode)


@router.put("/episodes/{episode_id}", response_model=EpisodeOut, summary="Update episode")
async def update_episode(
    episode_id: int, payload: EpisodeUpdate, db: AsyncSession = Depends(get_async_db)
) -> EpisodeOut:
    episode = await _patch(db, Episode, episode_id, _non_null(payload), "episode")
    return EpisodeOut.model_validate(episode)


@router.delete("/episodes/{episode_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete episode")
async def delete_episode(episode_id: int, db: AsyncSession = Depends(get_async_db)) -> Response:
    return await _delete(db, Episode, episode_id, "episode")


# ─────────────────────────────────────────────────────────────
# Video sources
# ─────────────────────────────────────────────────────────────
@router.post(
    "/video-sources",
    response_model=VideoSourceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create video source",
)
async def create_video_source(payload: VideoSourceCreate, db: AsyncSession = Depends(get_async_db)) -> VideoSourceOut:
    if not await _exists(db, Episode, payload.episode_id):
        raise ValidationError(
            "Failed to create video source", error=f"Episode with ID {payload.episode_id} does not exist"
        )
    source = await _insert(db, VideoSource(**payload.model_dump()), "video source")
    return VideoSourceOut.model_validate(source)


@router.put("/video-sources/{source_id}", response_model=VideoSourceOut, summary="Update video source")
async def update_video_source(
    source_id: int, payload: VideoSourceUpdate, db: AsyncSession = Depends(get_async_db)
) -> VideoSourceOut:
    source = await _patch(db, VideoSource, source_id, _non_null(payload), "video source")
    return VideoSourceOut.model_validate(source)


@router.delete("/video-sources/{source_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete video source")
async def delete_video_source(source_id: int, db: AsyncSession = Depends(get_async_db)) -> Response:
    return await _delete(db, VideoSource, source_id, "video source")


__all__ = ["router"]
