"""Scheduler backend protocol.

A backend only controls WHEN ticks happen; the collector decides WHAT
happens on each tick. Backends must never run two ticks at once.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

TickCallback = Callable[[], Any]


@runtime_checkable
class SchedulerBackend(Protocol):
    """Protocol for pluggable scheduler timing backends."""

    name: str

    def start(
        self,
        tick_callback: TickCallback,
        interval_seconds: float = 20.0,
        *,
        run_immediately: bool = True,
    ) -> None:
        """Start calling ``tick_callback`` every ``interval_seconds``."""
        ...

    def stop(self) -> None:
        """Stop the loop; waits a bounded time for an in-flight tick."""
        ...
