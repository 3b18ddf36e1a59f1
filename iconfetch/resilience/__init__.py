"""Resilience components: retrying, proxy-aware fetching."""

from iconfetch.resilience.fetcher import DEFAULT_HEADERS, HTML_HEADERS, ResilientFetcher

__all__ = [
    "DEFAULT_HEADERS",
    "HTML_HEADERS",
    "ResilientFetcher",
]
