"""API routers."""

from authcore.routers.auth import router as auth_router
from authcore.routers.users import router as users_router

__all__ = ["auth_router", "users_router"]
