from __future__ import annotations

"""
Admin: anime & genre writes

Routes (all require an Admin session)
-------------------------------------
- POST   /animes               → 201 created anime (with genres)
- PUT    /animes/{anime_id}    → 200 updated anime; `genres` replaces the set
- DELETE /animes/{anime_id}    → 204 (seasons/episodes/sources/links cascade)
- POST   /genres               → 201 genre (duplicate name → 400)
- DELETE /genres/{genre_id}    → 204
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.exceptions import AppException, ConflictError, InternalError, NotFoundError
from anistream.db.session import get_async_db
from anistream.dependencies.auth import require_admin
from anistream.repositories.anime import AnimeRepository, get_anime_repository
from anistream.schemas.anime import AnimeCreate, AnimeOut, AnimeUpdate, GenreCreate, GenreOut
from anistream.security_headers import set_sensitive_cache
from anistream.services.sessions import Identity

log = logging.getLogger(__name__)

router = APIRouter(tags=["Admin Catalog"])


def _repo(db: AsyncSession = Depends(get_async_db)) -> AnimeRepository:
    return get_anime_repository(db)


@router.post("/animes", response_model=AnimeOut, status_code=status.HTTP_201_CREATED, summary="Create anime")
async def create_anime(
    payload: AnimeCreate,
    response: Response,
    admin: Identity = Depends(require_admin),
    repo: AnimeRepository = Depends(_repo),
) -> AnimeOut:
    set_sensitive_cache(response)
    try:
        anime = await repo.create(payload)
    except AppException:
        raise
    except Exception as e:
        log.exception("Failed to create anime")
        raise InternalError.from_exc("Failed to create anime", e)
    log.info("Anime created id=%s by admin=%s", anime.id, admin.id)
    return AnimeOut.model_validate(anime)


@router.put("/animes/{anime_id}", response_model=AnimeOut, summary="Update anime")
async def update_anime(
    anime_id: int,
    payload: AnimeUpdate,
    response: Response,
    admin: Identity = Depends(require_admin),
    repo: AnimeRepository = Depends(_repo),
) -> AnimeOut:
    set_sensitive_cache(response)
    anime = await repo.get(anime_id)
    if anime is None:
        raise NotFoundError("Anime not found")
    try:
        anime = await repo.update(anime, payload)
    except AppException:
        raise
    except Exception as e:
        log.exception("Failed to update anime id=%s", anime_id)
        raise InternalError.from_exc("Failed to update anime", e)
    return AnimeOut.model_validate(anime)


@router.delete("/animes/{anime_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete anime")
async def delete_anime(
    anime_id: int,
    admin: Identity = Depends(require_admin),
    repo: AnimeRepository = Depends(_repo),
) -> Response:
    anime = await repo.get(anime_id)
    if anime is None:
        raise NotFoundError("Anime not found")
    try:
        await repo.delete(anime)
    except Exception as e:
        log.exception("Failed to delete anime id=%s", anime_id)
        raise InternalError.from_exc("Failed to delete anime", e)
    log.info("Anime deleted id=%s by admin=%s", anime_id, admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/genres", response_model=GenreOut, status_code=status.HTTP_201_CREATED, summary="Create genre")
async def create_genre(
    payload: GenreCreate,
    admin: Identity = Depends(require_admin),
    repo: AnimeRepository = Depends(_repo),
) -> GenreOut:
    if await repo.genre_name_taken(payload.name):
        raise ConflictError("Genre already exists")
    try:
        genre = await repo.create_genre(payload.name)
    except Exception as e:
        log.exception("Failed to create genre")
        raise InternalError.from_exc("Failed to create genre", e)
    return GenreOut.model_validate(genre)


@router.delete("/genres/{genre_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete genre")
async def delete_genre(
    genre_id: int,
    admin: Identity = Depends(require_admin),
    repo: AnimeRepository = Depends(_repo),
) -> Response:
    if not await repo.delete_genre(genre_id):
        raise NotFoundError("Genre not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
