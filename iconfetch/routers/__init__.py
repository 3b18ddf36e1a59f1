"""HTTP routers for the favicon service."""

from iconfetch.routers.favicon import create_favicon_router
from iconfetch.routers.health import create_health_router

__all__ = ["create_favicon_router", "create_health_router"]
