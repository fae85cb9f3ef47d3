"""State shared between the collector thread and the health endpoint."""

from __future__ import annotations

import time
from dataclasses import dataclass

from prestowatch.core.cache import DedupCache
from prestowatch.observability.metrics import MetricsSink


@dataclass
class CollectorContext:
    """Holds the dedup cache, metrics sink and last-success timestamp.

    The collector is the only writer of ``last_success`` and the only user
    of ``cache``; the health reporter only reads ``last_success``.
    """

    cache: DedupCache
    metrics: MetricsSink
    interval_seconds: float
    last_success: float = 0.0

    def mark_success(self, now: float | None = None) -> None:
        self.last_success = time.time() if now is None else now

    def seconds_since_success(self, now: float | None = None) -> float:
        current = time.time() if now is None else now
        return current - self.last_success


__all__ = ["CollectorContext"]
