"""Storage for proxy health records.

The proxy pool reads and mutates health records only through the
``HealthStore`` protocol, so the backing store is chosen at construction time.
``InMemoryHealthStore`` keeps records for the lifetime of one process and is
shared by every request that process serves; a deployment that recreates the
pipeline per request, or runs several processes, needs a shared store behind
the same protocol for health evidence to accumulate.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Protocol

from iconfetch.proxy.types import ProxyHealthRecord


class HealthStore(Protocol):
    """Protocol for proxy health record storage."""

    def get(self, name: str) -> ProxyHealthRecord:  # pragma: no cover
        """Return a snapshot of the record for ``name`` (zeroed if unseen)."""
        ...

    def record_failure(self, name: str, at: float) -> ProxyHealthRecord:  # pragma: no cover
        """Increment the fail counter and set ``last_fail``; return the new record."""
        ...

    def record_check_success(self, name: str, at: float) -> None:  # pragma: no cover
        """Reset the fail counter and set ``last_check``."""
        ...

    def reset_failures(self, name: str) -> None:  # pragma: no cover
        """Reset the fail counter after the recovery period elapsed."""
        ...

    def snapshot(self) -> dict[str, ProxyHealthRecord]:  # pragma: no cover
        """Return copies of every known record."""
        ...


class InMemoryHealthStore:
    """Process-local health store guarded by a lock."""

    def __init__(self) -> None:
        self._records: dict[str, ProxyHealthRecord] = {}
        self._lock = threading.Lock()

    def _get_or_create(self, name: str) -> ProxyHealthRecord:
        if name not in self._records:
            self._records[name] = ProxyHealthRecord()
        return self._records[name]

    def get(self, name: str) -> ProxyHealthRecord:
        with self._lock:
            return replace(self._get_or_create(name))

    def record_failure(self, name: str, at: float) -> ProxyHealthRecord:
        with self._lock:
            record = self._get_or_create(name)
            record.fails += 1
            record.last_fail = at
            return replace(record)

    def record_check_success(self, name: str, at: float) -> None:
        with self._lock:
            record = self._get_or_create(name)
            record.fails = 0
            record.last_check = at

    def reset_failures(self, name: str) -> None:
        with self._lock:
            self._get_or_create(name).fails = 0

    def snapshot(self) -> dict[str, ProxyHealthRecord]:
        with self._lock:
            return {name: replace(record) for name, record in self._records.items()}
