from __future__ import annotations

"""
🎬 AniStream: Public catalog API
=================================

Read-only, unauthenticated catalog endpoints.

Routes
------
- GET /animes/search               → title autocomplete `{data}`
- GET /animes                      → filtered/sorted/paginated `{data, pagination}`
- GET /animes/{anime_id}           → one anime with genres (404 if missing)
- GET /genres                      → `{data}` ordered by name

Query strings are parsed leniently: non-numeric `genreId`/`page`/`limit` fall
back to absent/defaults rather than failing the request.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from anistream.core.config import Settings
from anistream.core.exceptions import InternalError, NotFoundError
from anistream.db.session import get_async_db
from anistream.dependencies.auth import get_settings
from anistream.repositories.anime import AnimeRepository, get_anime_repository
from anistream.schemas.anime import AnimeOut, GenreOut
from anistream.schemas.common import DataEnvelope, PageOut, PaginationOut
from anistream.services.catalog_query import CatalogQuery, autocomplete, query_catalog

log = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])


def _repo(db: AsyncSession = Depends(get_async_db)) -> AnimeRepository:
    return get_anime_repository(db)


@router.get("/animes/search", response_model=DataEnvelope[AnimeOut], summary="Autocomplete anime titles")
async def search_animes(
    q: Optional[str] = Query(None, description="Title fragment (min 2 chars)"),
    limit: Optional[str] = Query(None, description="Max suggestions"),
    repo: AnimeRepository = Depends(_repo),
    settings: Settings = Depends(get_settings),
) -> DataEnvelope[AnimeOut]:
    if q is None or len(q) < 2:
        return DataEnvelope[AnimeOut](data=[])
    try:
        items = await repo.snapshot()
    except Exception as e:
        log.exception("Failed to search animes")
        raise InternalError.from_exc("Failed to search animes", e)
    hits = autocomplete(items, q, limit, default_limit=settings.AUTOCOMPLETE_DEFAULT_LIMIT)
    return DataEnvelope[AnimeOut](data=[AnimeOut.model_validate(a) for a in hits])


@router.get("/animes", response_model=PageOut[AnimeOut], summary="List animes")
async def list_animes(
    search: Optional[str] = Query(None),
    genre_id: Optional[str] = Query(None, alias="genreId"),
    year: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    order: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    repo: AnimeRepository = Depends(_repo),
    settings: Settings = Depends(get_settings),
) -> PageOut[AnimeOut]:
    params = CatalogQuery.from_raw(
        search=search,
        genre_id=genre_id,
        year=year,
        status=status,
        type=type,
        order=order,
        page=page,
        limit=limit,
        default_limit=settings.CATALOG_DEFAULT_LIMIT,
    )
    try:
        items = await repo.snapshot(params)
    except Exception as e:
        log.exception("Failed to fetch animes")
        raise InternalError.from_exc("Failed to fetch animes", e)

    page_ = query_catalog(items, params)
    p = page_.pagination
    return PageOut[AnimeOut](
        data=[AnimeOut.model_validate(a) for a in page_.data],
        pagination=PaginationOut(
            total=p.total,
            page=p.page,
            limit=p.limit,
            total_pages=p.total_pages,
            has_next_page=p.has_next_page,
            has_prev_page=p.has_prev_page,
        ),
    )


@router.get("/animes/{anime_id}", response_model=AnimeOut, summary="Get one anime")
async def get_anime(anime_id: int, repo: AnimeRepository = Depends(_repo)) -> AnimeOut:
    anime = await repo.get(anime_id)
    if anime is None:
        raise NotFoundError("Anime not found")
    return AnimeOut.model_validate(anime)


@router.get("/genres", response_model=DataEnvelope[GenreOut], summary="List genres")
async def list_genres(repo: AnimeRepository = Depends(_repo)) -> DataEnvelope[GenreOut]:
    try:
        genres = await repo.list_genres()
    except Exception as e:
        log.exception("Failed to fetch genres")
        raise InternalError.from_exc("Failed to fetch genres", e)
    return DataEnvelope[GenreOut](data=[GenreOut.model_validate(g) for g in genres])


__all__ = ["router"]
