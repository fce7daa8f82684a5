"""API routers."""

from reviewzone.api.auth import router as auth_router
from reviewzone.api.health import router as health_router

__all__ = ["auth_router", "health_router"]
