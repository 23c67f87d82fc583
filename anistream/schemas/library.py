from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from anistream.schemas.common import CamelModel


class WatchProgressIn(CamelModel):
    progress: int = Field(..., ge=0, description="Seconds watched")
    completed: bool = False


class WatchProgressOut(CamelModel):
    progress: Optional[int] = None
    completed: bool = False


class DownloadIn(CamelModel):
    quality: str = Field(..., min_length=1, max_length=32)


class DownloadOut(CamelModel):
    id: int
    episode_id: int
    quality: str
    completed: bool
    downloaded_at: datetime
