"""Liveness derived from the collector's last successful poll.

The process is considered alive while the last completed poll cycle is no
older than ``STALE_FACTOR`` poll intervals. A stuck or repeatedly failing
collector therefore shows up as an unhealthy probe.

Quick start::

    reporter = HealthReporter(context)
    report = reporter.check()
    report.status_code   # 200 or 500
    report.body          # human readable, includes seconds since last poll
"""

from __future__ import annotations

import time

from pydantic import BaseModel

from prestowatch.core.context import CollectorContext

STALE_FACTOR = 3


class HealthReport(BaseModel):
    """Result of one liveness check."""

    healthy: bool
    seconds_since_poll: int
    max_gap_seconds: float

    @property
    def status_code(self) -> int:
        return 200 if self.healthy else 500

    @property
    def body(self) -> str:
        state = "Watching" if self.healthy else "Stale"
        return f"{state}!\nPolled last: [{self.seconds_since_poll}] seconds ago (limit {self.max_gap_seconds:g})"


class HealthReporter:
    """Pure read of the shared collector context."""

    def __init__(self, context: CollectorContext):
        self._context = context

    @property
    def max_gap_seconds(self) -> float:
        return STALE_FACTOR * self._context.interval_seconds

    def check(self, now: float | None = None) -> HealthReport:
        current = time.time() if now is None else now
        gap = self._context.seconds_since_success(current)
        return HealthReport(
            healthy=gap <= self.max_gap_seconds,
            seconds_since_poll=int(gap),
            max_gap_seconds=self.max_gap_seconds,
        )


__all__ = [
    "STALE_FACTOR",
    "HealthReport",
    "HealthReporter",
]
