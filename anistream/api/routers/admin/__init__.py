from fastapi import APIRouter

from .animes import router as animes_router
from .episodes import router as episodes_router
from .users import router as users_router

router = APIRouter()
router.include_router(animes_router)
router.include_router(episodes_router)
router.include_router(users_router)

__all__ = ["router"]
