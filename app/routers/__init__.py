"""API routers."""

from app.routers.api_keys import router as api_keys_router
from app.routers.auth import router as auth_router
from app.routers.external import router as external_router

__all__ = ["auth_router", "api_keys_router", "external_router"]
