"""ORM models. Importing this package registers every table on `Base.metadata`."""

from anistream.db.models.user import User
from anistream.db.models.user_session import UserSession
from anistream.db.models.genre import Genre
from anistream.db.models.anime import Anime
from anistream.db.models.anime_genre import AnimeGenre
from anistream.db.models.season import Season
from anistream.db.models.episode import Episode
from anistream.db.models.video_source import VideoSource
from anistream.db.models.library import Download, FavoriteEntry, WatchlistEntry, WatchProgress

__all__ = [
    "User",
    "UserSession",
    "Genre",
    "Anime",
    "AnimeGenre",
    "Season",
    "Episode",
    "VideoSource",
    "WatchlistEntry",
    "FavoriteEntry",
    "WatchProgress",
    "Download",
]
