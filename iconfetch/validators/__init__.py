"""Validators package: URL normalization and resolution."""

from iconfetch.validators.url import extract_host, normalize_url, resolve_icon_href

__all__ = ["extract_host", "normalize_url", "resolve_icon_href"]
