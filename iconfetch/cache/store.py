"""Per-host icon cache on the local filesystem.

One file per host, named ``{host}_{md5(host)}.{ext}``. The file's modification
time is its creation/refresh time and the extension records the format it was
stored in, but on read the format is sniffed from the bytes. Non-canonical
entries (anything but PNG or SVG) are converted to PNG on read when possible
and the stale entry is replaced.

Cache I/O is best-effort: a failed read is a miss, a failed write is logged at
debug level and dropped. Only failing to create the cache directory raises.
"""

from __future__ import annotations

import glob
import hashlib
import logging
import os
import re
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

from iconfetch.imaging.mime import extension_for, sniff_mime
from iconfetch.imaging.normalizer import ImageNormalizer
from iconfetch.middleware.error_handler import CacheDirectoryError
from iconfetch.models.icon import IconResult
from iconfetch.validators.url import extract_host, normalize_url

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_TEMP_PREFIX = ".tmp-"


class CacheStore:
    """Filesystem cache of resolved icons.

    Args:
        cache_dir: Directory owned by the cache; created if missing.
        ttl_seconds: Entries older than this are expired.
        normalizer: Converter used to bring entries to PNG.
        clock: Wall-clock source in seconds.
    """

    def __init__(
        self,
        cache_dir: str | Path,
        ttl_seconds: int,
        normalizer: ImageNormalizer | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._dir = Path(cache_dir)
        self._ttl = ttl_seconds
        self._normalizer = normalizer or ImageNormalizer()
        self._clock = clock
        self._ensure_directory()

    @property
    def directory(self) -> Path:
        return self._dir

    def _ensure_directory(self) -> None:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheDirectoryError(
                f"Cannot create cache directory {self._dir}: {exc}",
                path=str(self._dir),
            ) from exc

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    @staticmethod
    def cache_key(url: str) -> str:
        """Host of ``url``, or the normalized URL when no host can be parsed."""
        normalized = normalize_url(url)
        return extract_host(normalized) or normalized

    def entry_stem(self, url: str) -> str:
        key = self.cache_key(url)
        digest = hashlib.md5(key.encode("utf-8")).hexdigest()
        return f"{_UNSAFE_CHARS.sub('_', key)}_{digest}"

    def _entries(self, stem: str) -> list[Path]:
        return sorted(self._dir.glob(f"{glob.escape(stem)}.*"))

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def lookup(self, url: str) -> IconResult | None:
        """Return the cached icon for ``url``'s host, or ``None`` on a miss."""
        self._ensure_directory()
        stem = self.entry_stem(url)

        for path in self._entries(stem):
            if self._is_expired(path):
                self._remove(path)
                continue
            try:
                content = path.read_bytes()
            except OSError as exc:
                logger.debug("Cache read failed for %s: %s", path, exc)
                continue
            if not content:
                continue
            return self._serve(path, stem, content)

        return None

    def _serve(self, path: Path, stem: str, content: bytes) -> IconResult:
        mime = sniff_mime(content)
        canonical, canonical_mime = self._normalizer.canonicalize(content, mime)
        if canonical_mime == mime:
            return IconResult(content=content, mime=mime, cached=True)

        canonical_path = self._dir / f"{stem}.{extension_for(canonical_mime)}"
        if self._write(canonical_path, canonical) and path != canonical_path:
            self._remove(path)
        return IconResult(content=canonical, mime=canonical_mime, cached=True)

    def _is_expired(self, path: Path) -> bool:
        try:
            mtime = path.stat().st_mtime
        except OSError:
            return True
        return mtime < self._clock() - self._ttl

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def store(self, url: str, result: IconResult) -> IconResult:
        """Persist ``result`` for ``url``'s host and return what was written.

        SVG and PNG are written verbatim; other formats are converted to PNG
        first when possible. The returned result is never marked cached.
        """
        self._ensure_directory()
        stem = self.entry_stem(url)
        content, mime = self._normalizer.canonicalize(result.content, result.mime)

        target = self._dir / f"{stem}.{extension_for(mime)}"
        if self._write(target, content):
            for sibling in self._entries(stem):
                if sibling != target:
                    self._remove(sibling)

        return IconResult(content=content, mime=mime, cached=False)

    def _write(self, path: Path, content: bytes) -> bool:
        """Atomically replace ``path`` with ``content``."""
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=_TEMP_PREFIX, dir=self._dir)
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(content)
                os.replace(tmp_name, path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.debug("Cache write failed for %s: %s", path, exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Eviction
    # ------------------------------------------------------------------

    def evict_expired(self) -> int:
        """Delete every file in the cache directory older than the TTL.

        Returns the number of files removed.
        """
        self._ensure_directory()
        cutoff = self._clock() - self._ttl
        removed = 0

        for path in self._dir.iterdir():
            try:
                if not path.is_file() or path.stat().st_mtime >= cutoff:
                    continue
            except OSError:
                continue
            if self._remove(path):
                removed += 1

        if removed:
            logger.info("Evicted %d expired cache entries from %s", removed, self._dir)
        return removed

    @staticmethod
    def _remove(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.debug("Cache delete failed for %s: %s", path, exc)
            return False
        return True
