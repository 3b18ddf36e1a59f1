"""URL normalization and icon href resolution."""

from __future__ import annotations

import posixpath
import re
from urllib.parse import urlsplit

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_url(url: str) -> str:
    """Prefix ``http://`` when no scheme is given and strip trailing slashes."""
    url = url.strip()
    if not _SCHEME_RE.match(url):
        url = f"http://{url}"
    return url.rstrip("/")


def extract_host(url: str) -> str | None:
    """Return the lower-cased host of ``url`` without port, or None if unparseable."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host or None


def resolve_icon_href(href: str, page_url: str) -> str:
    """Resolve an icon ``href`` found on ``page_url`` to an absolute URL.

    - protocol-relative (``//cdn/x.ico``): prefixed with the page scheme
    - absolute (``http...``): returned as-is
    - root-relative (``/x.ico``): joined with scheme and host
    - relative (``x.ico``): joined with scheme, host and the page's directory
    """
    href = href.strip()
    parts = urlsplit(page_url)
    scheme = parts.scheme or "http"

    if href.startswith("//"):
        return f"{scheme}:{href}"
    if href.lower().startswith("http"):
        return href

    origin = f"{scheme}://{parts.netloc}"
    if href.startswith("/"):
        return f"{origin}{href}"

    directory = posixpath.dirname(parts.path).rstrip("/")
    return f"{origin}{directory}/{href}"
