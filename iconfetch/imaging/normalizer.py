"""Best-effort conversion of icons to PNG.

Backends are tried in rank order. Each one reports whether it is available in
this process and whether it accepts a MIME type; the first backend that
accepts the input and converts it successfully wins. When no backend can
handle the input the normalizer reports "unchanged" (``None``) and callers
keep the original bytes.
"""

from __future__ import annotations

import io
import logging
from typing import Protocol

from PIL import Image, UnidentifiedImageError

from iconfetch.imaging.mime import CANONICAL_MIMES, PNG, SVG
from iconfetch.middleware.error_handler import ConversionError

logger = logging.getLogger(__name__)


class ConversionBackend(Protocol):
    """Protocol for a single image conversion backend."""

    name: str

    def available(self) -> bool:  # pragma: no cover
        ...

    def accepts(self, mime: str) -> bool:  # pragma: no cover
        ...

    def convert(self, content: bytes) -> bytes:  # pragma: no cover
        """Return PNG bytes or raise ConversionError."""
        ...


class SvgRasterizer:
    """Renders SVG documents to PNG with cairosvg, keeping the background transparent.

    cairosvg is an optional dependency (``iconfetch[svg]``) that also needs the
    native cairo library; the backend reports itself unavailable without them.
    """

    name = "cairosvg"

    def __init__(self) -> None:
        self._svg2png = None
        self._checked = False

    def available(self) -> bool:
        if not self._checked:
            self._checked = True
            try:
                import cairosvg
            except (ImportError, OSError) as exc:
                logger.debug("SVG rasterizer unavailable: %s", exc)
            else:
                self._svg2png = cairosvg.svg2png
        return self._svg2png is not None

    def accepts(self, mime: str) -> bool:
        return mime == SVG

    def convert(self, content: bytes) -> bytes:
        if not self.available():
            raise ConversionError("SVG rasterizer is not installed")
        try:
            return self._svg2png(bytestring=content, background_color="transparent")  # type: ignore[misc]
        except Exception as exc:
            raise ConversionError(f"SVG rendering failed: {exc}") from exc


class PillowRasterConverter:
    """Re-encodes raster images (ICO, JPEG, GIF, WebP, BMP...) as RGBA PNG."""

    name = "pillow"

    def available(self) -> bool:
        return True

    def accepts(self, mime: str) -> bool:
        return mime.startswith("image/") and mime not in (PNG, SVG)

    def convert(self, content: bytes) -> bytes:
        try:
            with Image.open(io.BytesIO(content)) as source:
                source.load()
                pixels = source.convert("RGBA")
        except (Image.DecompressionBombError, UnidentifiedImageError, OSError, ValueError) as exc:
            raise ConversionError(f"Cannot decode image: {exc}") from exc

        canvas = Image.new("RGBA", pixels.size, (255, 255, 255, 0))
        canvas.alpha_composite(pixels)

        buffer = io.BytesIO()
        canvas.save(buffer, format="PNG", optimize=True, compress_level=9)
        return buffer.getvalue()


class ImageNormalizer:
    """Converts non-canonical icons to PNG using the first capable backend."""

    def __init__(self, backends: list[ConversionBackend] | None = None) -> None:
        self._backends: list[ConversionBackend] = (
            backends if backends is not None else [SvgRasterizer(), PillowRasterConverter()]
        )

    def to_png(self, content: bytes, mime: str) -> bytes | None:
        """Return PNG bytes for ``content``, or ``None`` if it stays unchanged."""
        for backend in self._backends:
            if not backend.accepts(mime) or not backend.available():
                continue
            try:
                return backend.convert(content)
            except ConversionError as exc:
                logger.debug("Backend %s could not convert %s: %s", backend.name, mime, exc)
        return None

    def canonicalize(self, content: bytes, mime: str) -> tuple[bytes, str]:
        """Return ``(content, mime)`` in canonical form when possible.

        PNG and SVG are already canonical and pass through untouched.
        """
        if mime in CANONICAL_MIMES:
            return content, mime
        converted = self.to_png(content, mime)
        if converted is None:
            return content, mime
        return converted, PNG
