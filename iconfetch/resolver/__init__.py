"""Icon resolution: the ordered fallback chain and its stages."""

from iconfetch.resolver.base import BaseStage, ResolveTarget
from iconfetch.resolver.html import extract_icon_href
from iconfetch.resolver.resolver import IconResolver, default_stages
from iconfetch.resolver.stages import (
    ConventionalPathStage,
    ExternalServiceStage,
    HtmlLinkStage,
    duckduckgo_service,
    google_service,
)

__all__ = [
    "BaseStage",
    "ConventionalPathStage",
    "ExternalServiceStage",
    "HtmlLinkStage",
    "IconResolver",
    "ResolveTarget",
    "default_stages",
    "duckduckgo_service",
    "extract_icon_href",
    "google_service",
]
