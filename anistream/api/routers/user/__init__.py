from .account import router as account_router
from .library import router as library_router

__all__ = ["account_router", "library_router"]
