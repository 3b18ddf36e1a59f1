"""HTTP GET with retries and per-attempt proxy selection.

Each attempt classifies the target host, asks the proxy pool for a proxy in
that region (never one already tried in this fetch), and issues a GET with the
configured timeout, user agent and merged headers. Network errors, non-2xx
statuses and empty bodies all count as a failed attempt: the failure is charged
to the proxy used, if any, and the next attempt starts after ``retry_delay``.
After ``max_retries`` additional attempts a FetchError carrying the last error
is raised. The fetcher keeps no state between calls.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from iconfetch.config.proxies import ProxyDescriptor
from iconfetch.middleware.error_handler import EmptyResponseError, FetchError
from iconfetch.models.icon import FetchResponse
from iconfetch.models.region import Region
from iconfetch.proxy.classifier import DomainClassifier
from iconfetch.proxy.manager import ProxyPool
from iconfetch.validators.url import extract_host

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "image/webp,image/*,*/*;q=0.8",
    "Connection": "close",
}

HTML_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
}

_RETRYABLE = (httpx.HTTPError, httpx.InvalidURL, EmptyResponseError)


class ResilientFetcher:
    """Fetches URLs with retries, optionally through regional proxies.

    Args:
        classifier: Maps a host to its proxy region.
        proxy_pool: Source of proxies; ``None`` fetches directly.
        timeout: Per-request timeout in seconds.
        user_agent: User-Agent header value.
        max_retries: Additional attempts after the first one.
        retry_delay: Seconds to wait between attempts.
        verify_tls: Whether TLS certificates are verified.
        transport: Optional httpx transport used for every request instead of
            the network (proxy routing is then left to the transport).
    """

    def __init__(
        self,
        classifier: DomainClassifier,
        proxy_pool: ProxyPool | None = None,
        *,
        timeout: float = 5.0,
        user_agent: str = "iconfetch",
        max_retries: int = 2,
        retry_delay: float = 1.0,
        verify_tls: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._classifier = classifier
        self._proxy_pool = proxy_pool
        self._timeout = timeout
        self._user_agent = user_agent
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._verify_tls = verify_tls
        self._transport = transport

    async def fetch(self, url: str, headers: dict[str, str] | None = None) -> FetchResponse:
        """GET ``url`` and return its body.

        Raises
        ------
        FetchError
            If every attempt failed. ``details`` holds ``url``, ``attempts``
            and ``last_error``.
        """
        region = self._classifier.classify(extract_host(url) or "")
        request_headers = {**DEFAULT_HEADERS, "User-Agent": self._user_agent, **(headers or {})}
        used_proxies: list[str] = []
        last_error: Exception | None = None
        attempts = self._max_retries + 1

        for attempt in range(1, attempts + 1):
            proxy = await self._select_proxy(region, used_proxies)
            try:
                response = await self._get(url, request_headers, proxy)
                response.raise_for_status()
                if not response.content:
                    raise EmptyResponseError(url=url)
            except _RETRYABLE as exc:
                last_error = exc
                logger.debug(
                    "Attempt %d/%d failed for %s: %s",
                    attempt,
                    attempts,
                    url,
                    exc,
                    extra={
                        "target_url": url,
                        "attempt": attempt,
                        "proxy_used": proxy.name if proxy else None,
                        "error_reason": repr(exc),
                    },
                )
                if proxy is not None and self._proxy_pool is not None:
                    used_proxies.append(proxy.name)
                    self._proxy_pool.record_failure(proxy)
                if attempt < attempts and self._retry_delay > 0:
                    await asyncio.sleep(self._retry_delay)
                continue

            return FetchResponse(
                content=response.content,
                content_type=_media_type(response.headers.get("content-type")),
                url=str(response.url),
                proxy=proxy.name if proxy else None,
                attempts=attempt,
            )

        logger.debug(
            "All %d attempts failed for %s",
            attempts,
            url,
            extra={"target_url": url, "error_reason": repr(last_error)},
        )
        raise FetchError(
            f"Failed to fetch {url} after {attempts} attempts",
            url=url,
            attempts=attempts,
            last_error=last_error,
        )

    async def _select_proxy(
        self, region: Region, used_proxies: list[str]
    ) -> ProxyDescriptor | None:
        if self._proxy_pool is None:
            return None
        return await self._proxy_pool.select_proxy(region, exclude=used_proxies)

    async def _get(
        self,
        url: str,
        headers: dict[str, str],
        proxy: ProxyDescriptor | None,
    ) -> httpx.Response:
        async with self._client(url, proxy) as client:
            return await client.get(url, headers=headers)

    def _client(self, url: str, proxy: ProxyDescriptor | None) -> httpx.AsyncClient:
        kwargs: dict = {
            "timeout": httpx.Timeout(self._timeout),
            "verify": self._verify_tls,
            "follow_redirects": True,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif proxy is not None:
            kwargs["proxy"] = proxy.url_for(url)
        return httpx.AsyncClient(**kwargs)


def _media_type(content_type: str | None) -> str | None:
    """Strip parameters from a Content-Type header value."""
    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type or None
