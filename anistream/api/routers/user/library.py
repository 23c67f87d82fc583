from __future__ import annotations

"""
📚 AniStream: Personal library
===============================

Everything here is scoped to the session's own identity; there is no way to
name another user.

Routes
------
- GET    /watchlist                   → `{data}` newest first
- POST   /watchlist/{anime_id}        → 204 (idempotent; 404 for unknown anime)
- DELETE /watchlist/{anime_id}        → 204
- GET/POST/DELETE /favorites[...]     → same contract as watchlist
- POST   /watch-progress/{episode_id} → 204 upsert `{progress, completed}`
- GET    /watch-progress/{episode_id} → `{progress, completed}` (`progress: null` if never watched)
- POST   /downloads/{episode_id}      → 204 append-only record (quality + client IP)
- GET    /downloads                   → caller's history, newest first
"""

import logging
from typing import List, Type, Union

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.exceptions import InternalError, NotFoundError
from anistream.core.limiter import client_ip
from anistream.db.models import Anime, Download, Episode, FavoriteEntry, WatchlistEntry, WatchProgress
from anistream.db.session import get_async_db
from anistream.dependencies.auth import require_authenticated
from anistream.schemas.anime import AnimeOut
from anistream.schemas.common import DataEnvelope
from anistream.schemas.library import DownloadIn, DownloadOut, WatchProgressIn, WatchProgressOut
from anistream.security_headers import set_sensitive_cache
from anistream.services.sessions import Identity

log = logging.getLogger(__name__)

router = APIRouter(tags=["Library"])

Entry = Union[Type[WatchlistEntry], Type[FavoriteEntry]]


def _no_store(request: Request) -> None:
    set_sensitive_cache(request)


# ─────────────────────────────────────────────────────────────
# Watchlist / favorites (shared implementation)
# ─────────────────────────────────────────────────────────────
async def _list_entries(db: AsyncSession, model: Entry, user_id: int, what: str) -> DataEnvelope[AnimeOut]:
    try:
        rows = (
            await db.execute(
                select(model).where(model.user_id == user_id).order_by(model.added_at.desc(), model.anime_id.desc())
            )
        ).scalars().unique().all()
    except Exception as e:
        log.exception("Failed to fetch %s", what)
        raise InternalError.from_exc(f"Failed to fetch {what}", e)
    return DataEnvelope[AnimeOut](data=[AnimeOut.model_validate(r.anime) for r in rows])


async def _add_entry(db: AsyncSession, model: Entry, user_id: int, anime_id: int) -> Response:
    if await db.get(Anime, anime_id) is None:
        raise NotFoundError("Anime not found")
    exists = await db.scalar(select(model.anime_id).where(model.user_id == user_id, model.anime_id == anime_id))
    if exists is None:
        db.add(model(user_id=user_id, anime_id=anime_id))
        try:
            await db.commit()
        except IntegrityError:
            # concurrent add of the same pair; the row exists either way
            await db.rollback()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


async def _remove_entry(db: AsyncSession, model: Entry, user_id: int, anime_id: int) -> Response:
    await db.execute(delete(model).where(model.user_id == user_id, model.anime_id == anime_id))
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/watchlist", response_model=DataEnvelope[AnimeOut], dependencies=[Depends(_no_store)])
async def get_watchlist(
    me: Identity = Depends(require_authenticated), db: AsyncSession = Depends(get_async_db)
) -> DataEnvelope[AnimeOut]:
    return await _list_entries(db, WatchlistEntry, me.id, "watchlist")


@router.post("/watchlist/{anime_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_to_watchlist(
    anime_id: int, me: Identity = Depends(require_authenticated), db: AsyncSession = Depends(get_async_db)
) -> Response:
    return await _add_entry(db, WatchlistEntry, me.id, anime_id)


@router.delete("/watchlist/{anime_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_watchlist(
    anime_id: int, me: Identity = Depends(require_authenticated), db: AsyncSession = Depends(get_async_db)
) -> Response:
    return await _remove_entry(db, WatchlistEntry, me.id, anime_id)


@router.get("/favorites", response_model=DataEnvelope[AnimeOut], dependencies=[Depends(_no_store)])
async def get_favorites(
    me: Identity = Depends(require_authenticated), db: AsyncSession = Depends(get_async_db)
) -> DataEnvelope[AnimeOut]:
    return await _list_entries(db, FavoriteEntry, me.id, "favorites")


@router.post("/favorites/{anime_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_to_favorites(
    anime_id: int, me: Identity = Depends(require_authenticated), db: AsyncSession = Depends(get_async_db)
) -> Response:
    return await _add_entry(db, FavoriteEntry, me.id, anime_id)


@router.delete("/favorites/{anime_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_from_favorites(
    anime_id: int, me: Identity = Depends(require_authenticated), db: AsyncSession = Depends(get_async_db)
) -> Response:
    return await _remove_entry(db, FavoriteEntry, me.id, anime_id)


# ─────────────────────────────────────────────────────────────
# Watch progress
# ─────────────────────────────────────────────────────────────
@router.post("/watch-progress/{episode_id}", status_code=status.HTTP_204_NO_CONTENT)
async def save_watch_progress(
    episode_id: int,
    payload: WatchProgressIn,
    me: Identity = Depends(require_authenticated),
    db: AsyncSession = Depends(get_async_db),
) -> Response:
    if await db.get(Episode, episode_id) is None:
        raise NotFoundError("Episode not found")
    row = await db.scalar(
        select(WatchProgress).where(WatchProgress.user_id == me.id, WatchProgress.episode_id == episode_id)
    )
    if row is None:
        db.add(
            WatchProgress(user_id=me.id, episode_id=episode_id, progress=payload.progress, completed=payload.completed)
        )
    else:
        row.progress = payload.progress
        row.completed = payload.completed
    try:
        await db.commit()
    except IntegrityError:
        # lost an insert race for the same (user, episode); apply as an update
        await db.rollback()
        row = await db.scalar(
            select(WatchProgress).where(WatchProgress.user_id == me.id, WatchProgress.episode_id == episode_id)
        )
        row.progress = payload.progress
        row.completed = payload.completed
        await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/watch-progress/{episode_id}", response_model=WatchProgressOut, dependencies=[Depends(_no_store)])
async def get_watch_progress(
    episode_id: int, me: Identity = Depends(require_authenticated), db: AsyncSession = Depends(get_async_db)
) -> WatchProgressOut:
    row = await db.scalar(
        select(WatchProgress).where(WatchProgress.user_id == me.id, WatchProgress.episode_id == episode_id)
    )
    if row is None:
        return WatchProgressOut(progress=None, completed=False)
    return WatchProgressOut(progress=row.progress, completed=row.completed)


# ─────────────────────────────────────────────────────────────
# Downloads
# ─────────────────────────────────────────────────────────────
@router.post("/downloads/{episode_id}", status_code=status.HTTP_204_NO_CONTENT)
async def record_download(
    episode_id: int,
    payload: DownloadIn,
    request: Request,
    me: Identity = Depends(require_authenticated),
    db: AsyncSession = Depends(get_async_db),
) -> Response:
    if await db.get(Episode, episode_id) is None:
        raise NotFoundError("Episode not found")
    db.add(Download(user_id=me.id, episode_id=episode_id, quality=payload.quality, ip_address=client_ip(request)))
    await db.commit()
    log.info("Download recorded user=%s episode=%s quality=%s", me.id, episode_id, payload.quality)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/downloads", response_model=List[DownloadOut], dependencies=[Depends(_no_store)])
async def list_downloads(
    me: Identity = Depends(require_authenticated), db: AsyncSession = Depends(get_async_db)
) -> List[DownloadOut]:
    rows = (
        await db.execute(
            select(Download).where(Download.user_id == me.id).order_by(Download.downloaded_at.desc(), Download.id.desc())
        )
    ).scalars().all()
    return [DownloadOut.model_validate(d) for d in rows]


__all__ = ["router"]
