"""Proxy package: regional classification, weighted selection and health tracking."""

from iconfetch.proxy.classifier import DomainClassifier
from iconfetch.proxy.health_store import HealthStore, InMemoryHealthStore
from iconfetch.proxy.manager import ProxyPool
from iconfetch.proxy.types import ProxyHealthRecord

__all__ = [
    "DomainClassifier",
    "HealthStore",
    "InMemoryHealthStore",
    "ProxyHealthRecord",
    "ProxyPool",
]
