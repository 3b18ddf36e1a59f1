"""Favicon pipeline facade: cache first, then the resolver, then the cache again.

``FaviconService`` wires the components together from settings and the static
configuration objects. It is built once per process; construction sweeps
expired cache files.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from iconfetch.cache.store import CacheStore
from iconfetch.config.domains import DomainLists
from iconfetch.config.proxies import ProxyConfig
from iconfetch.config.settings import IconFetchSettings
from iconfetch.imaging.normalizer import ImageNormalizer
from iconfetch.imaging.placeholder import PlaceholderGenerator
from iconfetch.models.icon import IconResult
from iconfetch.proxy.classifier import DomainClassifier
from iconfetch.proxy.health_store import HealthStore
from iconfetch.proxy.manager import ProxyPool
from iconfetch.resilience.fetcher import ResilientFetcher
from iconfetch.resolver.resolver import IconResolver, default_stages
from iconfetch.validators.url import normalize_url

logger = logging.getLogger(__name__)


class FaviconService:
    """Returns an icon for any URL, from cache when possible.

    Args:
        settings: Service settings.
        domain_lists: Regional/global classification lists.
        proxy_config: Proxy pools, policy and health-check parameters.
        health_store: Shared proxy health storage; in-memory when omitted.
        transport: httpx transport for all outbound requests (tests).
    """

    def __init__(
        self,
        settings: IconFetchSettings,
        domain_lists: DomainLists,
        proxy_config: ProxyConfig,
        *,
        health_store: HealthStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self.classifier = DomainClassifier(domain_lists)
        self.proxy_pool = ProxyPool(
            proxy_config,
            health_store,
            verify_tls=settings.verify_tls,
        )
        self.fetcher = ResilientFetcher(
            self.classifier,
            self.proxy_pool,
            timeout=settings.timeout_seconds,
            user_agent=settings.user_agent,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay_seconds,
            verify_tls=settings.verify_tls,
            transport=transport,
        )
        self.placeholder = PlaceholderGenerator()
        self.resolver = IconResolver(
            default_stages(self.fetcher, probe_scheme=settings.probe_scheme),
            placeholder=self.placeholder,
        )
        self.cache = CacheStore(
            settings.cache_dir,
            settings.cache_ttl_seconds,
            normalizer=ImageNormalizer(),
        )
        self.cache.evict_expired()

    async def get_icon(self, url: str, refresh: bool = False) -> IconResult:
        """Return the icon for ``url``.

        A cache hit is returned with ``cached=True``. Otherwise the icon is
        resolved, stored (possibly converted to PNG) and returned with
        ``cached=False``. ``refresh`` skips the cache read only. Cache I/O and
        image conversion run in a worker thread.
        """
        normalized = normalize_url(url)

        if not refresh:
            hit = await asyncio.to_thread(self.cache.lookup, normalized)
            if hit is not None:
                logger.debug("Cache hit for %s", normalized, extra={"target_url": normalized, "cache": "HIT"})
                return hit

        logger.debug("Cache miss for %s", normalized, extra={"target_url": normalized, "cache": "MISS"})
        result = await self.resolver.resolve(normalized)

        if result.placeholder and not self._settings.cache_placeholders:
            return result
        return await asyncio.to_thread(self.cache.store, normalized, result)
