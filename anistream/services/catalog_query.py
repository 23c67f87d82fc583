from __future__ import annotations

"""
🔎 AniStream: Catalog query pipeline
=====================================

Pure, deterministic search/filter/sort/paginate over an in-memory snapshot of
catalog items (the repository fetches it fresh per request). Nothing here
touches the database, so every stage is unit-testable with plain objects.

Stage order (fixed)
-------------------
1. **search**    keep items whose title contains the query (case-insensitive)
2. **relevance** exact title > prefix > alphabetical (only when searching)
3. **filters**   genreId / year / status / type, AND-ed, `"All"` = no filter
4. **order**     explicit `order=` replaces the relevance order
5. **paginate**  `total` counted before slicing; out-of-range pages are empty

Ties are always broken by the incoming order: Python's sort is stable, so every
stage keeps the relative order of items its key does not distinguish.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from anistream.schemas.enums import OrderKind, enum_or_none

ALL = "All"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25
AUTOCOMPLETE_MIN_LENGTH = 2
AUTOCOMPLETE_DEFAULT_LIMIT = 5

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


class _GenreLike(Protocol):
    id: int


class CatalogItemLike(Protocol):
    title: str
    release_year: Optional[int]
    rating: Optional[float]
    status: Any
    type: Any
    genres: Sequence[_GenreLike]


T = TypeVar("T", bound=CatalogItemLike)


# ─────────────────────────────────────────────────────────────
# 🧮 Lenient parsing
# ─────────────────────────────────────────────────────────────
def parse_int(value: Any) -> Optional[int]:
    """
    Read a leading integer the way query strings are usually parsed:
    ``"12"`` → 12, ``"12abc"`` → 12, ``"abc"`` / ``""`` / None → None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    m = _LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else None


def _filter_value(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value)
    return None if value == "" or value == ALL else value


def normalize_search(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _enum_value(v: Any) -> Any:
    return getattr(v, "value", v)


# ─────────────────────────────────────────────────────────────
# 📦 Params & results
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class CatalogQuery:
    """Validated listing parameters. Build from raw query strings with `from_raw`."""

    search: str = ""
    genre_id: Optional[int] = None
    year: Optional[int] = None
    status: Optional[str] = None
    type: Optional[str] = None
    order: Optional[OrderKind] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_raw(
        cls,
        *,
        search: Optional[str] = None,
        genre_id: Optional[str] = None,
        year: Optional[str] = None,
        status: Optional[str] = None,
        type: Optional[str] = None,
        order: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        default_limit: int = DEFAULT_LIMIT,
    ) -> "CatalogQuery":
        """Never raises: unparsable numbers fall back to absent/defaults, unknown orders are dropped."""
        year_raw = _filter_value(year)
        genre_raw = _filter_value(genre_id)
        page_n = parse_int(page)
        limit_n = parse_int(limit)
        return cls(
            search=normalize_search(search),
            genre_id=parse_int(genre_raw) if genre_raw is not None else None,
            year=parse_int(year_raw) if year_raw is not None else None,
            status=_filter_value(status),
            type=_filter_value(type),
            order=enum_or_none(OrderKind, order),
            page=page_n if page_n is not None and page_n >= 1 else DEFAULT_PAGE,
            limit=limit_n if limit_n is not None and limit_n > 0 else default_limit,
        )


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


@dataclass
class Page(Generic[T]):
    data: List[T] = field(default_factory=list)
    pagination: Optional[Pagination] = None


# ─────────────────────────────────────────────────────────────
# 🧱 Stages
# ─────────────────────────────────────────────────────────────
def apply_search(items: Iterable[T], needle: str) -> List[T]:
    """Keep items whose lowercased title contains `needle` (already normalized). Description is ignored."""
    if not needle:
        return list(items)
    return [it for it in items if needle in (it.title or "").lower()]


def relevance_key(needle: str):
    """Sort key: exact match (0) < prefix match (1) < everything else (2), then title."""

    def _key(item: CatalogItemLike) -> Tuple[int, str]:
        title = (item.title or "").lower()
        if title == needle:
            rank = 0
        elif title.startswith(needle):
            rank = 1
        else:
            rank = 2
        return rank, title

    return _key


def rank_by_relevance(items: Iterable[T], needle: str) -> List[T]:
    return sorted(items, key=relevance_key(needle))


def apply_filters(items: Iterable[T], params: CatalogQuery) -> List[T]:
    out = list(items)
    if params.genre_id is not None:
        out = [it for it in out if any(g.id == params.genre_id for g in (it.genres or ()))]
    if params.year is not None:
        out = [it for it in out if it.release_year == params.year]
    if params.status is not None:
        out = [it for it in out if _enum_value(it.status) == params.status]
    if params.type is not None:
        out = [it for it in out if _enum_value(it.type) == params.type]
    return out


def _year(item: CatalogItemLike) -> int:
    return item.release_year or 0


def _rating(item: CatalogItemLike) -> float:
    return float(item.rating or 0)


def _title(item: CatalogItemLike) -> str:
    return (item.title or "").casefold()


def apply_order(items: Iterable[T], order: Optional[OrderKind]) -> List[T]:
    """Explicit ordering; `None` keeps the current order."""
    out = list(items)
    if order is None:
        return out
    if order is OrderKind.LATEST:
        return sorted(out, key=_year, reverse=True)
    if order is OrderKind.OLDEST:
        return sorted(out, key=_year)
    if order is OrderKind.TITLE_ASC:
        return sorted(out, key=_title)
    if order is OrderKind.TITLE_DESC:
        return sorted(out, key=_title, reverse=True)
    if order is OrderKind.RATING_DESC:
        return sorted(out, key=_rating, reverse=True)
    if order is OrderKind.RATING_ASC:
        return sorted(out, key=_rating)
    return out


def paginate(items: Sequence[T], page: int, limit: int) -> Page[T]:
    total = len(items)
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    start = (page - 1) * limit
    return Page(
        data=list(items[start:start + limit]),
        pagination=Pagination(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        ),
    )


# ─────────────────────────────────────────────────────────────
# 🚀 Entry points
# ─────────────────────────────────────────────────────────────
def query_catalog(items: Sequence[T], params: CatalogQuery) -> Page[T]:
    """Run the full pipeline over `items` (assumed in base order, i.e. by title)."""
    result: List[T] = list(items)
    if params.search:
        result = rank_by_relevance(apply_search(result, params.search), params.search)
    result = apply_filters(result, params)
    result = apply_order(result, params.order)
    return paginate(result, params.page, params.limit)


def autocomplete(
    items: Sequence[T],
    q: Optional[str],
    limit: Any = None,
    *,
    default_limit: int = AUTOCOMPLETE_DEFAULT_LIMIT,
) -> List[T]:
    """
    Title suggestions for a search box.

    A raw query shorter than two characters yields nothing; the listing
    endpoint has no such minimum.
    """
    if q is None or len(q) < AUTOCOMPLETE_MIN_LENGTH:
        return []
    needle = normalize_search(q)
    if not needle:
        return []
    n = parse_int(limit)
    n = n if n is not None and n > 0 else default_limit
    return rank_by_relevance(apply_search(items, needle), needle)[:n]


__all__ = [
    "ALL",
    "CatalogQuery",
    "Pagination",
    "Page",
    "parse_int",
    "normalize_search",
    "apply_search",
    "relevance_key",
    "rank_by_relevance",
    "apply_filters",
    "apply_order",
    "paginate",
    "query_catalog",
    "autocomplete",
]
