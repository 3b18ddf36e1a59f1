"""Request ID middleware.

Generates (or propagates) a UUID request ID for every incoming request,
stores it in ``request.state.request_id`` and in a context variable read by
the logging filter, and adds an ``X-Request-ID`` response header so icon
responses can be correlated with fetch logs.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def current_request_id() -> str | None:
    """ID of the request being handled in this context, or ``None``."""
    return _request_id.get()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assigns a unique request ID to each favicon request.

    An incoming ``X-Request-ID`` header is reused; otherwise a new UUID4 is
    generated.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = _request_id.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            _request_id.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response
