"""Interval scheduling for the collector loop."""

from prestowatch.core.scheduling.protocol import SchedulerBackend, TickCallback
from prestowatch.core.scheduling.thread_backend import ThreadSchedulerBackend

__all__ = [
    "SchedulerBackend",
    "ThreadSchedulerBackend",
    "TickCallback",
]
