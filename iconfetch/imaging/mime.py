"""Content-based MIME sniffing and MIME/extension mapping.

Stored extensions and Content-Type headers are not trusted; the bytes decide.
SVG is recognised textually, raster formats by Pillow's header identification,
and anything else falls back to puremagic's signature table.
"""

from __future__ import annotations

import io
import logging
import re

import puremagic
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

PNG = "image/png"
SVG = "image/svg+xml"
OCTET_STREAM = "application/octet-stream"

CANONICAL_MIMES = frozenset({PNG, SVG})

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/svg+xml": "svg",
    "image/x-icon": "ico",
}

_SVG_RE = re.compile(rb"<svg[\s>]", re.IGNORECASE)
_HTML_RE = re.compile(rb"<(!doctype\s+html|html)[\s>]", re.IGNORECASE)
_SVG_SNIFF_BYTES = 4096


def extension_for(mime: str) -> str:
    """Cache file extension for ``mime``; unknown types map to ``png``."""
    return _EXTENSIONS.get(mime, "png")


def _looks_like_svg(content: bytes) -> bool:
    head = content[:_SVG_SNIFF_BYTES].lstrip(b"\xef\xbb\xbf \t\r\n")
    if head.startswith(b"<svg"):
        return True
    if not (head.startswith(b"<?xml") or head.startswith(b"<!")):
        return False
    # Inline <svg> inside an HTML document is not an SVG file.
    if _HTML_RE.search(head):
        return False
    return _SVG_RE.search(head) is not None


def sniff_mime(content: bytes) -> str:
    """Detect the MIME type of ``content`` from its bytes."""
    if not content:
        return OCTET_STREAM

    if _looks_like_svg(content):
        return SVG

    try:
        with Image.open(io.BytesIO(content)) as image:
            mime = Image.MIME.get(image.format or "")
            if mime:
                return mime
    except Image.DecompressionBombError as exc:
        logger.debug("Rejected oversized image: %s", exc)
        return OCTET_STREAM
    except (UnidentifiedImageError, OSError, ValueError):
        pass

    try:
        mime = puremagic.from_string(content, mime=True)
    except (puremagic.PureError, ValueError):
        return OCTET_STREAM
    return mime or OCTET_STREAM


def is_image_mime(mime: str | None) -> bool:
    return bool(mime) and mime.lower().startswith("image/")  # type: ignore[union-attr]
