"""Middleware package: error hierarchy and request ID."""

from iconfetch.middleware.error_handler import (
    CacheDirectoryError,
    ConversionError,
    EmptyResponseError,
    FetchError,
    IconFetchError,
    InvalidRequestError,
    register_error_handlers,
)
from iconfetch.middleware.request_id import RequestIdMiddleware, current_request_id

__all__ = [
    "CacheDirectoryError",
    "ConversionError",
    "EmptyResponseError",
    "FetchError",
    "IconFetchError",
    "InvalidRequestError",
    "RequestIdMiddleware",
    "current_request_id",
    "register_error_handlers",
]
