"""iconfetch: favicon resolution service with proxy-aware fetching and a file cache."""

from iconfetch.models.icon import IconResult
from iconfetch.pipeline import FaviconService

__all__ = ["FaviconService", "IconResult"]

__version__ = "1.0.0"
