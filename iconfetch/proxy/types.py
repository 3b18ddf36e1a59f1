"""Proxy health data models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ProxyHealthRecord:
    """Health counters for one proxy, keyed by proxy name.

    Timestamps are wall-clock seconds; zero means "never".
    """

    fails: int = 0
    last_fail: float = 0.0
    last_check: float = 0.0
