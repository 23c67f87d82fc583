from __future__ import annotations

"""
Central enum definitions used across AniStream.

Design notes
------------
• All enums subclass `str, PyEnum` for JSON-friendly serialization.
• VALUE STRINGS are **stable** once deployed (DB enums and the public API use them).
"""

from enum import Enum as PyEnum
from typing import Optional, Type, TypeVar

E = TypeVar("E", bound=PyEnum)


# ──────────────────────────────────────────────────────────────
# Catalog
# ──────────────────────────────────────────────────────────────
class AnimeType(str, PyEnum):
    TV = "TV"
    MOVIE = "Movie"
    OVA = "OVA"
    SPECIAL = "Special"


class AnimeStatus(str, PyEnum):
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    UPCOMING = "Upcoming"


class OrderKind(str, PyEnum):
    """Explicit catalog orderings accepted by `GET /animes?order=`."""
    LATEST = "Latest"
    OLDEST = "Oldest"
    TITLE_ASC = "Title (A-Z)"
    TITLE_DESC = "Title (Z-A)"
    RATING_DESC = "Rating (High-Low)"
    RATING_ASC = "Rating (Low-High)"


# ──────────────────────────────────────────────────────────────
# Accounts
# ──────────────────────────────────────────────────────────────
class UserRole(str, PyEnum):
    USER = "User"
    MANAGER = "Manager"
    ADMIN = "Admin"


class UserStatus(str, PyEnum):
    ACTIVE = "Active"
    BLOCKED = "Blocked"


def enum_or_none(enum_cls: Type[E], value: Optional[str]) -> Optional[E]:
    """Exact-value lookup; unknown values give None instead of raising."""
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


__all__ = ["AnimeType", "AnimeStatus", "OrderKind", "UserRole", "UserStatus", "enum_or_none"]
