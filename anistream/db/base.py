# anistream/db/base.py
"""
AniStream: SQLAlchemy Base registry
====================================

Import all ORM models so their tables are registered on `Base.metadata`.
Alembic's `env.py` and the test schema fixture import `Base` from here.

Keep this file import-only; no runtime logic.
"""

from anistream.db.base_class import Base
from anistream.db.models import (  # noqa: F401
    Anime,
    AnimeGenre,
    Download,
    Episode,
    FavoriteEntry,
    Genre,
    Season,
    User,
    UserSession,
    VideoSource,
    WatchlistEntry,
    WatchProgress,
)

__all__ = ["Base"]
