"""Favicon endpoint.

- GET /?url=<target>&refresh=<bool> returns the icon bytes with HTTP caching
  headers and ``X-Cache: HIT|MISS``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

from fastapi import APIRouter, Request, Response

from iconfetch.middleware.error_handler import InvalidRequestError


def create_favicon_router(*, max_age_seconds: int) -> APIRouter:
    """Factory that creates the favicon router.

    The pipeline is read from ``app.state.service`` at request time.
    """

    favicon_router = APIRouter(tags=["favicon"])

    @favicon_router.get("/")
    async def get_favicon(
        request: Request,
        url: str | None = None,
        refresh: bool = False,
    ) -> Response:
        """Return the icon for ``url``, resolving and caching it on a miss."""
        if url is None or not url.strip():
            raise InvalidRequestError()

        service = request.app.state.service
        result = await service.get_icon(url.strip(), refresh=refresh)

        expires = datetime.now(timezone.utc) + timedelta(seconds=max_age_seconds)
        headers = {
            "Cache-Control": f"public, max-age={max_age_seconds}",
            "Expires": format_datetime(expires, usegmt=True),
            "X-Cache": "HIT" if result.cached else "MISS",
        }
        return Response(content=result.content, media_type=result.mime, headers=headers)

    return favicon_router
