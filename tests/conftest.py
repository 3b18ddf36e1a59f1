"""Shared test fixtures for the iconfetch test suite."""

from __future__ import annotations

import io
import random
import struct
from collections.abc import Callable

import httpx
import pytest
from PIL import Image

from iconfetch.config.domains import DomainLists
from iconfetch.config.proxies import ProxyConfig
from iconfetch.config.settings import IconFetchSettings


# ---------------------------------------------------------------------------
# Settings and configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path) -> IconFetchSettings:
    """Test settings: cache under tmp_path, one retry, no delays."""
    return IconFetchSettings(
        cache_dir=str(tmp_path / "cache"),
        max_retries=1,
        retry_delay_seconds=0,
        timeout_seconds=1.0,
    )


@pytest.fixture
def domain_lists() -> DomainLists:
    return DomainLists(
        regional_whitelist=["baidu.com", "qq.com"],
        global_whitelist=["github.io"],
        regional_suffixes=[".cn", "top"],
    )


@pytest.fixture
def make_proxy_config() -> Callable[..., ProxyConfig]:
    """Factory building a ProxyConfig from plain dicts, like the YAML loader sees."""

    def _make(
        regional: list[dict] | None = None,
        global_: list[dict] | None = None,
        *,
        use_regional: bool = True,
        use_global: bool = True,
        **health_check,
    ) -> ProxyConfig:
        return ProxyConfig.model_validate(
            {
                "strategy": {
                    "use_proxy_for_regional": use_regional,
                    "use_proxy_for_global": use_global,
                },
                "servers": {"regional": regional or [], "global": global_ or []},
                "health_check": health_check,
            }
        )

    return _make


# ---------------------------------------------------------------------------
# Time and randomness
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Factory encoding a solid-color image with Pillow."""

    def _make(fmt: str = "PNG", size: tuple[int, int] = (16, 16), color=(200, 30, 30)) -> bytes:
        mode = "RGBA" if fmt in ("PNG", "ICO") else "RGB"
        if fmt == "GIF":
            mode = "P"
        image = Image.new(mode, size, color if mode != "P" else 1)
        buffer = io.BytesIO()
        image.save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def bomb_image() -> bytes:
    """A 2x2 BMP whose header claims 20000x20000 pixels."""
    buffer = io.BytesIO()
    Image.new("RGB", (2, 2)).save(buffer, format="BMP")
    data = bytearray(buffer.getvalue())
    struct.pack_into("<ii", data, 18, 20000, 20000)
    return bytes(data)


SVG_ICON = (
    b'<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16">'
    b'<rect width="16" height="16" fill="#0c8f8f"/></svg>'
)


@pytest.fixture
def svg_icon() -> bytes:
    return SVG_ICON


# ---------------------------------------------------------------------------
# Fake web
# ---------------------------------------------------------------------------


class FakeWeb:
    """Routes requests by URL (trailing slash ignored) to canned responses; everything else 404s.

    ``requests`` records every URL requested, in order.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[str] = []

    def add(
        self,
        url: str,
        content: bytes = b"",
        *,
        status: int = 200,
        content_type: str | None = None,
    ) -> None:
        headers = {"content-type": content_type} if content_type else {}
        self.routes[url.rstrip("/")] = lambda request: httpx.Response(
            status, content=content, headers=headers
        )

    def add_error(self, url: str, exc_type: type[Exception] = httpx.ConnectError) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc_type("simulated failure", request=request)

        self.routes[url.rstrip("/")] = _raise

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        route = self.routes.get(url.rstrip("/"))
        if route is None:
            return httpx.Response(404, content=b"not found")
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def web() -> FakeWeb:
    return FakeWeb()

