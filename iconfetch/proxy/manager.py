"""Proxy pool with weighted random selection, health probes, and a penalty box.

Proxies are grouped per region (regional / global). Selection filters out
proxies that crossed the failure threshold and are still inside their recovery
window, probes any candidate whose last health check is older than the check
interval, and draws one of the survivors with probability proportional to its
weight. Returning ``None`` means "fetch directly": the region has no pool,
proxy use is disabled for it, or no candidate is eligible.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Awaitable, Callable, Iterable

import httpx

from iconfetch.config.proxies import ProxyConfig, ProxyDescriptor
from iconfetch.models.region import Region
from iconfetch.proxy.health_store import HealthStore, InMemoryHealthStore

logger = logging.getLogger(__name__)

ProxyProbe = Callable[[ProxyDescriptor, str], Awaitable[bool]]


class ProxyPool:
    """Selects proxies per region and tracks their health.

    Args:
        config: Proxy pools, policy flags and health-check parameters.
        health_store: Where health records live. Defaults to a process-local
            in-memory store.
        probe: Coroutine ``(proxy, test_url) -> bool`` used for health checks.
            Defaults to an HTTP GET of the test URL through the proxy.
        rng: Random generator for weighted selection.
        clock: Wall-clock source in seconds.
        verify_tls: Whether health probes verify TLS certificates.
    """

    def __init__(
        self,
        config: ProxyConfig,
        health_store: HealthStore | None = None,
        *,
        probe: ProxyProbe | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
        verify_tls: bool = True,
    ) -> None:
        self._config = config
        self._store: HealthStore = health_store if health_store is not None else InMemoryHealthStore()
        self._probe = probe or self._http_probe
        self._rng = rng or random.Random()
        self._clock = clock
        self._verify_tls = verify_tls

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    async def select_proxy(
        self,
        region: Region,
        exclude: Iterable[str] = (),
    ) -> ProxyDescriptor | None:
        """Pick a healthy proxy for ``region``, or ``None`` to go direct.

        Proxies named in ``exclude`` (already tried during the current fetch)
        are never returned.
        """
        if not self._config.strategy.enabled_for(region):
            return None

        pool = self._config.servers.for_region(region)
        if not pool:
            return None

        excluded = set(exclude)
        eligible: list[ProxyDescriptor] = []
        for proxy in pool:
            if proxy.name in excluded:
                continue
            if await self._is_eligible(proxy, region):
                eligible.append(proxy)

        if not eligible:
            logger.debug("No eligible %s proxy, fetching directly", region.value)
            return None

        return self._weighted_choice(eligible)

    async def _is_eligible(self, proxy: ProxyDescriptor, region: Region) -> bool:
        health = self._config.health_check
        now = self._clock()
        record = self._store.get(proxy.name)

        if record.fails >= health.fail_threshold:
            if now - record.last_fail < health.recovery_time:
                return False
            self._store.reset_failures(proxy.name)
            logger.info("Proxy %s left the penalty box", proxy.name)

        if now - record.last_check > health.interval:
            test_url = health.test_url.for_region(region)
            if await self._probe(proxy, test_url):
                self._store.record_check_success(proxy.name, self._clock())
            else:
                self.record_failure(proxy)
                return False

        return True

    def _weighted_choice(self, candidates: list[ProxyDescriptor]) -> ProxyDescriptor:
        total_weight = sum(proxy.weight for proxy in candidates)
        draw = self._rng.randint(1, total_weight)

        cumulative = 0
        for proxy in candidates:
            cumulative += proxy.weight
            if cumulative >= draw:
                return proxy
        return candidates[0]

    # ------------------------------------------------------------------
    # Health tracking
    # ------------------------------------------------------------------

    def record_failure(self, proxy: ProxyDescriptor) -> None:
        """Count a failed request through ``proxy``."""
        record = self._store.record_failure(proxy.name, self._clock())
        if record.fails == self._config.health_check.fail_threshold:
            logger.warning(
                "Proxy %s reached %d failures, excluded for %ss",
                proxy.name,
                record.fails,
                self._config.health_check.recovery_time,
            )

    def in_penalty_box(self, proxy: ProxyDescriptor) -> bool:
        health = self._config.health_check
        record = self._store.get(proxy.name)
        return (
            record.fails >= health.fail_threshold
            and self._clock() - record.last_fail < health.recovery_time
        )

    async def _http_probe(self, proxy: ProxyDescriptor, test_url: str) -> bool:
        """Fetch ``test_url`` through ``proxy`` with the health-check timeout."""
        try:
            async with httpx.AsyncClient(
                proxy=proxy.url_for(test_url),
                timeout=httpx.Timeout(self._config.health_check.timeout),
                verify=self._verify_tls,
                follow_redirects=True,
            ) as client:
                response = await client.get(test_url)
                return response.is_success
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.debug("Health probe failed for proxy %s: %s", proxy.name, exc)
            return False

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Return per-proxy health for the health endpoint."""
        per_proxy = []
        for region in Region:
            for proxy in self._config.servers.for_region(region):
                record = self._store.get(proxy.name)
                per_proxy.append(
                    {
                        "name": proxy.name,
                        "region": region.value,
                        "weight": proxy.weight,
                        "fails": record.fails,
                        "last_fail": record.last_fail,
                        "last_check": record.last_check,
                        "in_penalty_box": self.in_penalty_box(proxy),
                    }
                )

        return {
            "use_proxy_for_regional": self._config.strategy.use_proxy_for_regional,
            "use_proxy_for_global": self._config.strategy.use_proxy_for_global,
            "total": len(per_proxy),
            "excluded": sum(1 for p in per_proxy if p["in_penalty_box"]),
            "proxies": per_proxy,
        }
