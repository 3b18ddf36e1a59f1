"""Proxy configuration models and YAML loader.

Describes the regional and global proxy pools, the per-region policy flags,
and the health-check parameters consumed by the proxy pool.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from iconfetch.models.region import Region

logger = logging.getLogger(__name__)


class ProxyDescriptor(BaseModel):
    """A single configured proxy server."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    http_url: str | None = None
    https_url: str | None = None
    weight: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _require_endpoint(self) -> "ProxyDescriptor":
        if not self.http_url and not self.https_url:
            raise ValueError(f"proxy '{self.name}' needs an http_url or https_url")
        return self

    def url_for(self, target_url: str) -> str:
        """Pick the proxy endpoint matching the target URL's scheme."""
        if target_url.lower().startswith("https://"):
            return self.https_url or self.http_url  # type: ignore[return-value]
        return self.http_url or self.https_url  # type: ignore[return-value]


class ProxyStrategy(BaseModel):
    """Whether proxies are used at all for each region."""

    model_config = ConfigDict(frozen=True)

    use_proxy_for_regional: bool = False
    use_proxy_for_global: bool = False

    def enabled_for(self, region: Region) -> bool:
        if region is Region.REGIONAL:
            return self.use_proxy_for_regional
        return self.use_proxy_for_global


class ProxyServers(BaseModel):
    """Proxy pools keyed by region."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    regional: tuple[ProxyDescriptor, ...] = ()
    global_: tuple[ProxyDescriptor, ...] = Field(default=(), alias="global")

    def for_region(self, region: Region) -> tuple[ProxyDescriptor, ...]:
        if region is Region.REGIONAL:
            return self.regional
        return self.global_


class HealthCheckTestUrls(BaseModel):
    """URL fetched through a proxy to probe its health, per region."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    regional: str = "http://www.baidu.com"
    global_: str = Field(default="https://www.google.com", alias="global")

    def for_region(self, region: Region) -> str:
        if region is Region.REGIONAL:
            return self.regional
        return self.global_


class HealthCheckConfig(BaseModel):
    """Proxy health tracking parameters (seconds)."""

    model_config = ConfigDict(frozen=True)

    interval: float = Field(default=300, ge=0)
    fail_threshold: int = Field(default=3, ge=1)
    recovery_time: float = Field(default=600, ge=0)
    timeout: float = Field(default=5, gt=0)
    test_url: HealthCheckTestUrls = Field(default_factory=HealthCheckTestUrls)


class ProxyConfig(BaseModel):
    """Complete proxy configuration."""

    model_config = ConfigDict(frozen=True)

    strategy: ProxyStrategy = Field(default_factory=ProxyStrategy)
    servers: ProxyServers = Field(default_factory=ProxyServers)
    health_check: HealthCheckConfig = Field(default_factory=HealthCheckConfig)


def _parse_servers(raw: object) -> ProxyServers:
    """Validate each proxy entry individually so one bad entry does not sink the pool."""
    if not isinstance(raw, dict):
        return ProxyServers()

    pools: dict[str, list[ProxyDescriptor]] = {"regional": [], "global": []}
    for region_key in pools:
        for entry in raw.get(region_key) or []:
            try:
                pools[region_key].append(ProxyDescriptor.model_validate(entry))
            except Exception as exc:
                logger.error("Invalid %s proxy entry %r: %s, skipping", region_key, entry, exc)

    return ProxyServers(regional=tuple(pools["regional"]), **{"global": tuple(pools["global"])})


def load_proxy_config(yaml_path: str) -> ProxyConfig:
    """Parse a proxies YAML file into a ProxyConfig.

    A missing or malformed file yields the built-in defaults (no proxies, proxy
    use disabled for both regions).
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Proxy config file not found at %s, proxies disabled", yaml_path)
        return ProxyConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse proxy config YAML at %s: %s", yaml_path, exc)
        return ProxyConfig()

    if raw is None:
        return ProxyConfig()
    if not isinstance(raw, dict):
        logger.warning("Proxy config YAML at %s is not a mapping, proxies disabled", yaml_path)
        return ProxyConfig()

    try:
        strategy = ProxyStrategy.model_validate(raw.get("strategy") or {})
        health_check = HealthCheckConfig.model_validate(raw.get("health_check") or {})
    except Exception as exc:
        logger.error("Invalid proxy config at %s: %s, proxies disabled", yaml_path, exc)
        return ProxyConfig()

    return ProxyConfig(
        strategy=strategy,
        servers=_parse_servers(raw.get("servers")),
        health_check=health_check,
    )
