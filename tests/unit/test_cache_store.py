"""Unit tests for the filesystem cache store."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from iconfetch.cache.store import CacheStore
from iconfetch.imaging.mime import sniff_mime
from iconfetch.imaging.normalizer import ImageNormalizer
from iconfetch.middleware.error_handler import CacheDirectoryError
from iconfetch.models.icon import IconResult

TTL = 3600


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def store(cache_dir, clock) -> CacheStore:
    return CacheStore(cache_dir, TTL, clock=clock)


def _entry(cache_dir, host: str, ext: str):
    return cache_dir / f"{host}_{hashlib.md5(host.encode()).hexdigest()}.{ext}"


class TestNaming:
    """Test cache keys and entry names."""

    def test_key_is_host(self):
        assert CacheStore.cache_key("https://www.example.com/page") == "www.example.com"

    def test_key_ignores_scheme_and_path(self):
        assert CacheStore.cache_key("example.com") == CacheStore.cache_key("https://example.com/x/")

    def test_entry_stem(self, store):
        digest = hashlib.md5(b"example.com").hexdigest()
        assert store.entry_stem("http://example.com") == f"example.com_{digest}"

    def test_creates_directory(self, cache_dir, store):
        assert cache_dir.is_dir()

    def test_unusable_directory_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_bytes(b"x")
        with pytest.raises(CacheDirectoryError):
            CacheStore(blocker / "cache", TTL)


class TestStoreAndLookup:
    """Test writes, hits and misses."""

    def test_miss(self, store):
        assert store.lookup("example.com") is None

    def test_png_round_trip(self, store, cache_dir, make_image):
        png = make_image("PNG")
        written = store.store("http://example.com", IconResult(png, "image/png"))

        assert written == IconResult(png, "image/png", cached=False)
        assert _entry(cache_dir, "example.com", "png").read_bytes() == png
        assert store.lookup("http://example.com/") == IconResult(png, "image/png", cached=True)

    def test_svg_written_verbatim(self, store, cache_dir, svg_icon):
        store.store("example.com", IconResult(svg_icon, "image/svg+xml"))

        assert _entry(cache_dir, "example.com", "svg").read_bytes() == svg_icon
        hit = store.lookup("example.com")
        assert hit.content == svg_icon
        assert hit.mime == "image/svg+xml"

    def test_raster_converted_before_write(self, store, cache_dir, make_image):
        written = store.store("example.com", IconResult(make_image("ICO"), "image/x-icon"))

        assert written.mime == "image/png"
        assert _entry(cache_dir, "example.com", "png").exists()
        assert not _entry(cache_dir, "example.com", "ico").exists()

    def test_unconvertible_written_under_own_extension(self, cache_dir, clock, make_image):
        store = CacheStore(cache_dir, TTL, normalizer=ImageNormalizer([]), clock=clock)
        jpeg = make_image("JPEG")

        written = store.store("example.com", IconResult(jpeg, "image/jpeg"))

        assert written.mime == "image/jpeg"
        assert _entry(cache_dir, "example.com", "jpg").read_bytes() == jpeg

    def test_store_replaces_sibling_entries(self, store, cache_dir, make_image, svg_icon):
        store.store("example.com", IconResult(svg_icon, "image/svg+xml"))
        store.store("example.com", IconResult(make_image("PNG"), "image/png"))

        entries = sorted(p.name for p in cache_dir.iterdir())
        assert entries == [_entry(cache_dir, "example.com", "png").name]

    def test_hosts_do_not_collide(self, store, make_image, svg_icon):
        store.store("a.com", IconResult(svg_icon, "image/svg+xml"))
        store.store("b.com", IconResult(make_image("PNG"), "image/png"))
        assert store.lookup("a.com").mime == "image/svg+xml"
        assert store.lookup("b.com").mime == "image/png"

    def test_no_temp_files_left(self, store, cache_dir, make_image):
        store.store("example.com", IconResult(make_image("PNG"), "image/png"))
        assert not [p for p in cache_dir.iterdir() if p.name.startswith(".tmp-")]


class TestConversionOnRead:
    """Test correction of non-canonical entries at lookup time."""

    def test_extension_not_trusted(self, store, cache_dir, make_image):
        png = make_image("PNG")
        _entry(cache_dir, "example.com", "ico").write_bytes(png)

        hit = store.lookup("example.com")

        assert hit.mime == "image/png"
        assert hit.content == png

    def test_jpeg_entry_replaced_by_png(self, store, cache_dir, make_image):
        _entry(cache_dir, "example.com", "jpg").write_bytes(make_image("JPEG", size=(12, 8)))

        hit = store.lookup("example.com")

        assert hit.cached is True
        assert hit.mime == "image/png"
        assert sniff_mime(hit.content) == "image/png"
        assert _entry(cache_dir, "example.com", "png").read_bytes() == hit.content
        assert not _entry(cache_dir, "example.com", "jpg").exists()

    def test_unconvertible_entry_returned_unchanged(self, cache_dir, clock, make_image):
        store = CacheStore(cache_dir, TTL, normalizer=ImageNormalizer([]), clock=clock)
        gif = make_image("GIF")
        _entry(cache_dir, "example.com", "gif").write_bytes(gif)

        hit = store.lookup("example.com")

        assert hit == IconResult(gif, "image/gif", cached=True)
        assert _entry(cache_dir, "example.com", "gif").exists()

    def test_empty_entry_is_a_miss(self, store, cache_dir):
        _entry(cache_dir, "example.com", "png").write_bytes(b"")
        assert store.lookup("example.com") is None


class TestExpiry:
    """Test TTL handling at lookup and in the startup sweep."""

    def _age(self, path, clock, seconds: float) -> None:
        stamp = clock.now - seconds
        os.utime(path, (stamp, stamp))

    def test_expired_entry_is_a_miss_and_removed(self, store, cache_dir, clock, make_image):
        store.store("example.com", IconResult(make_image("PNG"), "image/png"))
        path = _entry(cache_dir, "example.com", "png")
        self._age(path, clock, TTL + 1)

        assert store.lookup("example.com") is None
        assert not path.exists()

    def test_fresh_entry_survives(self, store, cache_dir, clock, make_image):
        store.store("example.com", IconResult(make_image("PNG"), "image/png"))
        self._age(_entry(cache_dir, "example.com", "png"), clock, TTL - 10)
        assert store.lookup("example.com") is not None

    def test_evict_expired_sweeps_directory(self, store, cache_dir, clock):
        old = cache_dir / "old.png"
        stray = cache_dir / "unrelated.txt"
        fresh = cache_dir / "fresh.png"
        for path in (old, stray, fresh):
            path.write_bytes(b"x")
        self._age(old, clock, TTL + 1)
        self._age(stray, clock, TTL * 10)
        self._age(fresh, clock, 5)

        assert store.evict_expired() == 2
        assert [p.name for p in cache_dir.iterdir()] == ["fresh.png"]

    def test_evict_skips_subdirectories(self, store, cache_dir, clock):
        subdir = cache_dir / "nested"
        subdir.mkdir()
        self._age(subdir, clock, TTL * 2)
        assert store.evict_expired() == 0
        assert subdir.exists()


class TestIoFailures:
    """Test that read and write errors never escape the store."""

    def test_unreadable_entry_is_a_miss(self, store, make_image):
        store.store("example.com", IconResult(make_image("PNG"), "image/png"))

        with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
            assert store.lookup("example.com") is None

    def test_failed_replace_keeps_existing_entry(self, store, cache_dir, make_image, svg_icon):
        store.store("example.com", IconResult(svg_icon, "image/svg+xml"))
        png = make_image("PNG")

        with patch("iconfetch.cache.store.os.replace", side_effect=OSError("disk full")):
            result = store.store("example.com", IconResult(png, "image/png"))

        assert result == IconResult(png, "image/png", cached=False)
        assert _entry(cache_dir, "example.com", "svg").read_bytes() == svg_icon
        assert not _entry(cache_dir, "example.com", "png").exists()
        assert not [p for p in cache_dir.iterdir() if p.name.startswith(".tmp-")]

    def test_failed_temp_file_still_returns_result(self, store, cache_dir, make_image):
        png = make_image("PNG")

        with patch("iconfetch.cache.store.tempfile.mkstemp", side_effect=OSError("read-only")):
            result = store.store("example.com", IconResult(png, "image/png"))

        assert result == IconResult(png, "image/png", cached=False)
        assert list(cache_dir.iterdir()) == []


class RecordingNormalizer(ImageNormalizer):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    def canonicalize(self, content: bytes, mime: str) -> tuple[bytes, str]:
        self.calls.append(mime)
        return super().canonicalize(content, mime)


class TestNormalizerSeam:
    """Test that reads and writes share the normalizer's canonical form."""

    def test_store_and_read_go_through_canonicalize(self, cache_dir, clock, make_image):
        normalizer = RecordingNormalizer()
        store = CacheStore(cache_dir, TTL, normalizer=normalizer, clock=clock)
        _entry(cache_dir, "b.example", "jpg").write_bytes(make_image("JPEG"))

        store.store("a.example", IconResult(make_image("GIF"), "image/gif"))
        hit = store.lookup("b.example")

        assert normalizer.calls == ["image/gif", "image/jpeg"]
        assert hit.mime == "image/png"
