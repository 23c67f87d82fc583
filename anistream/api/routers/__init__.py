"""
🧭 AniStream • API Router Aggregator
====================================

Composes public catalog, auth, personal library, self-service account and
admin routes into one `APIRouter`.

Quick usage
-----------
    from anistream.api.routers import build_api_router
    app.include_router(build_api_router(), prefix=settings.API_PREFIX)

Security notes
--------------
- This layer is a pure aggregator; **auth lives in child routers** via
  `require_authenticated` / `require_admin`.
- Admin writes share paths with public reads (`GET /animes` vs `POST /animes`);
  they are separated by method, not by prefix.
"""

from fastapi import APIRouter

from .admin import router as admin_router
from .auth import session_auth_router
from .public import animes_router, episodes_router
from .user import account_router, library_router


def build_api_router() -> APIRouter:
    r = APIRouter()

    # 🛰️ Public catalog reads
    r.include_router(animes_router)
    r.include_router(episodes_router)

    # 🔐 Session auth (/register, /login, /logout, /user)
    r.include_router(session_auth_router)

    # 📚 Personal data, scoped to the caller
    r.include_router(library_router)
    r.include_router(account_router, prefix="/user")

    # 🛠️ Admin writes and user management
    r.include_router(admin_router)

    return r


router = build_api_router()

__all__ = ["build_api_router", "router"]
