"""Cache package: per-host icon files with TTL eviction."""

from iconfetch.cache.store import CacheStore

__all__ = ["CacheStore"]
