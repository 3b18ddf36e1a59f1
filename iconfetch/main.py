"""FastAPI application entry point with lifespan management.

Startup: configure logging, load domain lists and proxy configuration, build
the favicon pipeline (which sweeps expired cache entries once).
Shutdown: nothing to drain; requests hold no background work.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from iconfetch.config.domains import load_domain_lists
from iconfetch.config.proxies import load_proxy_config
from iconfetch.config.settings import IconFetchSettings
from iconfetch.logging_config import configure_logging
from iconfetch.middleware.error_handler import register_error_handlers
from iconfetch.middleware.request_id import RequestIdMiddleware
from iconfetch.pipeline import FaviconService
from iconfetch.routers.favicon import create_favicon_router
from iconfetch.routers.health import create_health_router

logger = logging.getLogger(__name__)


def build_service(settings: IconFetchSettings) -> FaviconService:
    """Load static configuration and construct the pipeline."""
    domain_lists = load_domain_lists(settings.domains_config_path)
    proxy_config = load_proxy_config(settings.proxies_config_path)
    return FaviconService(settings, domain_lists, proxy_config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: build the pipeline once per process."""
    settings: IconFetchSettings = app.state.settings

    configure_logging(settings.effective_log_level)
    if not settings.verify_tls:
        logger.warning("TLS certificate verification is disabled for outbound fetches")

    if getattr(app.state, "service", None) is None:
        app.state.service = build_service(settings)

    logger.info("Favicon service started on port %d", settings.port)

    yield

    logger.info("Favicon service shut down")


def create_app(
    settings: IconFetchSettings | None = None,
    service: FaviconService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``service`` replaces the pipeline normally built at startup.
    """
    settings = settings or IconFetchSettings()

    app = FastAPI(
        title="iconfetch",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service

    register_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(create_health_router())
    app.include_router(
        create_favicon_router(max_age_seconds=settings.response_max_age_seconds)
    )

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = IconFetchSettings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


app = create_app()


if __name__ == "__main__":
    run()
