"""Value objects exchanged between the pipeline components."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IconResult:
    """An icon payload ready to be served.

    ``mime`` always describes ``content``; ``cached`` tells whether it was
    served from the on-disk cache. ``placeholder`` marks generated icons.
    """

    content: bytes
    mime: str
    cached: bool = False
    placeholder: bool = False


@dataclass(frozen=True)
class FetchResponse:
    """Raw result of a successful fetch."""

    content: bytes
    content_type: str | None  # Header value without parameters, lower-cased
    url: str  # Final URL after redirects
    proxy: str | None = None  # Name of the proxy used, if any
    attempts: int = 1
