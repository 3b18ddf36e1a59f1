"""Configuration module: settings, domain lists and proxy pools."""

from iconfetch.config.domains import DomainLists, load_domain_lists
from iconfetch.config.proxies import (
    HealthCheckConfig,
    ProxyConfig,
    ProxyDescriptor,
    ProxyServers,
    ProxyStrategy,
    load_proxy_config,
)
from iconfetch.config.settings import IconFetchSettings

__all__ = [
    "DomainLists",
    "HealthCheckConfig",
    "IconFetchSettings",
    "ProxyConfig",
    "ProxyDescriptor",
    "ProxyServers",
    "ProxyStrategy",
    "load_domain_lists",
    "load_proxy_config",
]
