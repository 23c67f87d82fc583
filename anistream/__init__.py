"""AniStream: anime catalog and user-account API."""

__version__ = "1.0.0"
