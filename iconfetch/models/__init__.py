"""Public models for the favicon service."""

from iconfetch.models.icon import FetchResponse, IconResult
from iconfetch.models.region import Region
from iconfetch.models.responses import ApiResponse

__all__ = [
    "ApiResponse",
    "FetchResponse",
    "IconResult",
    "Region",
]
