"""JSON envelope for the service's non-image responses.

Health reports and errors share one shape:
{ success: bool, data: T | None, error: str | None, meta: dict | None }
Icon responses are raw image bytes and do not use it.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for health and error responses."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None
