"""Static regional/global classification of hosts.

First match wins:
1. host equals or is a subdomain of a regional whitelist entry -> regional
2. host equals or is a subdomain of a global whitelist entry -> global
3. host ends with a configured regional suffix (case-insensitive) -> regional
4. otherwise -> global

No DNS or IP geolocation lookup is performed.
"""

from __future__ import annotations

from iconfetch.config.domains import DomainLists
from iconfetch.models.region import Region


def _matches_domain(host: str, domains: tuple[str, ...]) -> bool:
    return any(host == domain or host.endswith(f".{domain}") for domain in domains)


class DomainClassifier:
    """Decides which proxy pool a host belongs to."""

    def __init__(self, domain_lists: DomainLists) -> None:
        self._lists = domain_lists

    def classify(self, host: str) -> Region:
        host = host.strip().lower().rstrip(".")
        if not host:
            return Region.GLOBAL

        if _matches_domain(host, self._lists.regional_whitelist):
            return Region.REGIONAL
        if _matches_domain(host, self._lists.global_whitelist):
            return Region.GLOBAL
        if any(host.endswith(suffix) for suffix in self._lists.regional_suffixes):
            return Region.REGIONAL
        return Region.GLOBAL
