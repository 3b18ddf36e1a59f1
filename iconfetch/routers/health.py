"""Health endpoint.

- GET /health: service status plus proxy pool statistics
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from iconfetch.models.responses import ApiResponse


def create_health_router() -> APIRouter:
    """Factory that creates the health router."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health(request: Request) -> dict:
        """Service health check with per-proxy health records."""
        service = getattr(request.app.state, "service", None)
        proxy_stats = service.proxy_pool.get_stats() if service else {}

        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "proxy_pool": proxy_stats,
            },
        ).model_dump()

    return health_router
