from .session_auth import router as session_auth_router

__all__ = ["session_auth_router"]
