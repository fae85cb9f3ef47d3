"""Threading-based scheduler backend.

┌──────────────────────────────────────────────────────────────────────────────┐
│  THREAD BACKEND                                                              │
│                                                                              │
│   start()                                                                    │
│      │                                                                       │
│      ▼                                                                       │
│   Daemon Thread (loop)                                                       │
│      if run_immediately: tick()                                              │
│      while not stop_event.wait(interval):                                    │
│          tick()                                                              │
│                                                                              │
│   stop()                                                                     │
│      stop_event.set()                                                        │
│      thread.join(timeout=join_timeout)                                       │
│                                                                              │
│  One thread runs every tick, so ticks never overlap: a slow tick simply     │
│  delays the next wait.                                                       │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import threading

from prestowatch.framework.logging import get_logger

from .protocol import TickCallback

logger = get_logger(__name__)


class ThreadSchedulerBackend:
    """Runs a synchronous tick callback on a single daemon thread.

    Example:
        >>> backend = ThreadSchedulerBackend()
        >>> backend.start(collector.run_cycle, interval_seconds=20)
        >>> # ... later ...
        >>> backend.stop()
    """

    name = "thread"

    def __init__(self, *, join_timeout: float = 5.0) -> None:
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._join_timeout = join_timeout
        self._started = False

    def start(
        self,
        tick_callback: TickCallback,
        interval_seconds: float = 20.0,
        *,
        run_immediately: bool = True,
    ) -> None:
        """Start the scheduler loop in a daemon thread.

        Args:
            tick_callback: Function to call on each tick.
            interval_seconds: Seconds between the end of one wait and the next.
            run_immediately: Tick once before the first wait.
        """
        if self._started:
            logger.warning("scheduler_already_started", backend=self.name)
            return

        self._stop_event.clear()

        def _tick() -> None:
            try:
                tick_callback()
            except Exception:
                logger.exception("tick_failed")

        def _loop() -> None:
            logger.debug("scheduler_started", interval_seconds=interval_seconds)
            if run_immediately:
                _tick()
            while not self._stop_event.wait(interval_seconds):
                logger.debug("timer_tick")
                _tick()
            logger.info("scheduler_stopped")

        self._thread = threading.Thread(target=_loop, daemon=True, name="prestowatch-collector")
        self._thread.start()
        self._started = True

    def stop(self) -> None:
        """Stop the scheduler loop.

        Waits up to ``join_timeout`` seconds for an in-flight tick; after that
        the daemon thread is abandoned.
        """
        if not self._started:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self._join_timeout)
            if self._thread.is_alive():
                logger.warning("scheduler_thread_abandoned")

        self._started = False

    @property
    def is_running(self) -> bool:
        return self._started and self._thread is not None and self._thread.is_alive()

