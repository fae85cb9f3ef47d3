"""
Timing helpers for logging step durations.

- Start logs at DEBUG, end at INFO with ``duration_ms``
- Failures log at ERROR and re-raise
- Each block gets a span id, nested blocks record their parent
"""

import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from prestowatch.framework.logging.context import get_context, get_logger, push_context


def _generate_span_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class TimingResult:
    """Result of a timed block."""

    step: str
    span_id: str = field(default_factory=_generate_span_id)
    parent_span_id: str | None = None
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)

    def stop(self) -> "TimingResult":
        self.ended_at = time.perf_counter()
        return self

    @property
    def duration_ms(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return (end - self.started_at) * 1000

    def add_metric(self, key: str, value: Any) -> "TimingResult":
        """Add a value to include in the end-of-step log line."""
        self.metrics[key] = value
        return self

    def to_log_dict(self) -> dict[str, Any]:
        result = {"duration_ms": round(self.duration_ms, 2), "span_id": self.span_id}
        if self.parent_span_id:
            result["parent_span_id"] = self.parent_span_id
        result.update(self.metrics)
        return result


@contextmanager
def log_step(event: str, logger_name: str = "prestowatch.timing", **extra) -> Iterator[TimingResult]:
    """
    Log ``{event}.start`` / ``{event}.end`` around a block.

    Usage:
        with log_step("collector.cycle") as timer:
            timer.add_metric("queries", len(queries))
    """
    log = get_logger(logger_name)
    timer = TimingResult(step=event, parent_span_id=get_context().span_id)
    token = push_context(span_id=timer.span_id, parent_span_id=timer.parent_span_id)
    log.debug(f"{event}.start", **extra)
    try:
        yield timer
    except Exception as e:
        timer.stop()
        log.error(f"{event}.failed", error_type=type(e).__name__, error=str(e), **timer.to_log_dict(), **extra)
        raise
    else:
        timer.stop()
        log.info(f"{event}.end", **timer.to_log_dict(), **extra)
    finally:
        token.restore()
