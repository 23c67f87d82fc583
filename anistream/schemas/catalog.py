from __future__ import annotations

"""Seasons, episodes and video sources (owned children of an anime)."""

from typing import Optional

from pydantic import Field

from anistream.schemas.common import CamelModel


# ── Seasons ────────────────────────────────────────────────────
class SeasonOut(CamelModel):
    id: int
    anime_id: int
    number: int
    title: Optional[str] = None


class SeasonCreate(CamelModel):
    anime_id: int
    number: int = Field(..., ge=0)
    title: Optional[str] = Field(None, max_length=255)


class SeasonUpdate(CamelModel):
    number: Optional[int] = Field(None, ge=0)
    title: Optional[str] = Field(None, max_length=255)


# ── Episodes ───────────────────────────────────────────────────
class EpisodeOut(CamelModel):
    id: int
    season_id: int
    number: int
    title: str
    description: Optional[str] = None
    duration: str
    thumbnail: Optional[str] = None


class EpisodeCreate(CamelModel):
    season_id: int
    number: int = Field(..., ge=0)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    duration: str = Field(..., min_length=1, max_length=64)
    thumbnail: Optional[str] = Field(None, max_length=1024)


class EpisodeUpdate(CamelModel):
    number: Optional[int] = Field(None, ge=0)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    duration: Optional[str] = Field(None, min_length=1, max_length=64)
    thumbnail: Optional[str] = Field(None, max_length=1024)


# ── Video sources ──────────────────────────────────────────────
class VideoSourceOut(CamelModel):
    id: int
    episode_id: int
    quality: str
    url: str
    is_downloadable: bool = False


class VideoSourceCreate(CamelModel):
    episode_id: int
    quality: str = Field(..., min_length=1, max_length=32)
    url: str = Field(..., min_length=1, max_length=2048)
    is_downloadable: bool = False


class VideoSourceUpdate(CamelModel):
    quality: Optional[str] = Field(None, min_length=1, max_length=32)
    url: Optional[str] = Field(None, min_length=1, max_length=2048)
    is_downloadable: Optional[bool] = None
