from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from anistream.schemas.common import CamelModel
from anistream.schemas.enums import AnimeStatus, AnimeType


class GenreOut(CamelModel):
    id: int
    name: str


class GenreCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=80)

    @field_validator("name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class AnimeOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    type: AnimeType
    status: AnimeStatus
    release_year: Optional[int] = None
    rating: Optional[float] = None
    duration: Optional[str] = None
    cover_image: Optional[str] = None
    banner_image: Optional[str] = None
    featured: bool = False
    genres: List[GenreOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class _AnimeFields(CamelModel):
    description: Optional[str] = None
    release_year: Optional[int] = Field(None, ge=1900, le=2100)
    rating: Optional[float] = Field(None, ge=0, le=10)
    duration: Optional[str] = Field(None, max_length=64)
    cover_image: Optional[str] = Field(None, max_length=1024)
    banner_image: Optional[str] = Field(None, max_length=1024)

    @field_validator("rating")
    @classmethod
    def _one_decimal(cls, v: Optional[float]) -> Optional[float]:
        return None if v is None else round(v, 1)


class AnimeCreate(_AnimeFields):
    title: str = Field(..., min_length=1, max_length=255)
    type: AnimeType
    status: AnimeStatus
    featured: bool = False
    genres: List[int] = Field(default_factory=list, description="Genre ids")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


class AnimeUpdate(_AnimeFields):
    """Partial update; `genres`, when present, replaces the whole set."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[AnimeType] = None
    status: Optional[AnimeStatus] = None
    featured: Optional[bool] = None
    genres: Optional[List[int]] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return v
