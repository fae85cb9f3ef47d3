"""Counter metrics and metric sinks.

The classifier emits counter increments through a ``MetricsSink``:

- ``StatsdSink``   sends DogStatsD datagrams over UDP (production)
- ``RegistrySink`` accumulates into an in-process ``MetricsRegistry``
  (tests)

Example:
    >>> sink = RegistrySink()
    >>> sink.incr_counter("presto.watcher.queried_partitions", 1, {"table": "hive.web.events"})
    >>> sink.registry.counter("presto.watcher.queried_partitions").labels(table="hive.web.events").value
    1.0
"""

import socket
import threading
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from prestowatch.core.errors import InvalidConfigError
from prestowatch.framework.logging import get_logger

logger = get_logger(__name__)

QUERIED_PARTITIONS = "presto.watcher.queried_partitions"
QUERY_PARTITION_COUNTS = "presto.watcher.query_partition_counts"


@dataclass(frozen=True)
class Labels:
    """Immutable label set for metrics."""

    _labels: tuple[tuple[str, str], ...]

    @classmethod
    def from_dict(cls, d: dict[str, str] | None) -> "Labels":
        if not d:
            return cls(())
        return cls(tuple(sorted(d.items())))

    def to_dict(self) -> dict[str, str]:
        return dict(self._labels)


class Counter:
    """A monotonically increasing counter, optionally labelled."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._values: dict[Labels, float] = {}
        self._lock = threading.Lock()

    def labels(self, **kwargs: str) -> "CounterChild":
        """Get counter with specific labels."""
        return CounterChild(self, Labels.from_dict(kwargs))

    def inc(self, value: float = 1.0) -> None:
        """Increment counter (no labels)."""
        self.labels().inc(value)

    def _inc(self, labels: Labels, value: float) -> None:
        with self._lock:
            self._values[labels] = self._values.get(labels, 0.0) + value

    def _get(self, labels: Labels) -> float:
        with self._lock:
            return self._values.get(labels, 0.0)

    def collect(self) -> list[dict[str, Any]]:
        """Collect all counter values."""
        with self._lock:
            return [
                {"name": self.name, "type": "counter", "labels": labels.to_dict(), "value": value}
                for labels, value in self._values.items()
            ]


class CounterChild:
    """Counter with fixed labels."""

    def __init__(self, counter: Counter, labels: Labels):
        self._counter = counter
        self._labels = labels

    def inc(self, value: float = 1.0) -> None:
        if value < 0:
            raise ValueError("Counter can only increase")
        self._counter._inc(self._labels, value)

    @property
    def value(self) -> float:
        return self._counter._get(self._labels)


class MetricsRegistry:
    """Registry of counters, read back with ``collect()``."""

    def __init__(self):
        self._metrics: dict[str, Counter] = {}
        self._lock = threading.Lock()

    def counter(self, name: str, description: str = "") -> Counter:
        """Get or create a counter."""
        with self._lock:
            if name not in self._metrics:
                self._metrics[name] = Counter(name, description)
            return self._metrics[name]

    def collect(self) -> list[dict[str, Any]]:
        with self._lock:
            metrics = list(self._metrics.values())
        results = []
        for metric in metrics:
            results.extend(metric.collect())
        return results


# ------------------------------------------------------------------ #
# Sinks
# ------------------------------------------------------------------ #


@runtime_checkable
class MetricsSink(Protocol):
    """Destination for counter increments."""

    def incr_counter(self, name: str, value: float, labels: dict[str, str]) -> None:
        """Increment counter ``name`` by ``value`` under ``labels``."""
        ...


class RegistrySink:
    """Sink that records increments into a ``MetricsRegistry``."""

    def __init__(self, registry: MetricsRegistry | None = None):
        self.registry = registry or MetricsRegistry()

    def incr_counter(self, name: str, value: float, labels: dict[str, str]) -> None:
        self.registry.counter(name).labels(**labels).inc(value)

    def value(self, name: str, **labels: str) -> float:
        """Current value of ``name`` under ``labels``."""
        return self.registry.counter(name).labels(**labels).value


class StatsdSink:
    """DogStatsD sink over UDP.

    Each increment is sent as one datagram ``name:value|c|#k:v,...``.
    Send failures are logged and dropped; metrics never fail a poll cycle.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8125, *, prefix: str = ""):
        """Open the UDP socket.

        Raises:
            InvalidConfigError: If the address cannot be resolved.
        """
        self._prefix = prefix
        try:
            family, _, _, _, address = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
        except (socket.gaierror, UnicodeError) as e:
            raise InvalidConfigError("statsd_host", f"{host}:{port}", f"Unable to start statsd sink for {host}:{port}: {e}") from e
        self._address = address
        self._sock = socket.socket(family, socket.SOCK_DGRAM)

    @staticmethod
    def _format_tags(labels: dict[str, str]) -> str:
        if not labels:
            return ""
        return "|#" + ",".join(f"{k}:{v}" for k, v in sorted(labels.items()))

    def format(self, name: str, value: float, labels: dict[str, str]) -> str:
        """Render one DogStatsD counter line."""
        full_name = f"{self._prefix}{name}" if self._prefix else name
        amount = int(value) if float(value).is_integer() else value
        return f"{full_name}:{amount}|c{self._format_tags(labels)}"

    def incr_counter(self, name: str, value: float, labels: dict[str, str]) -> None:
        line = self.format(name, value, labels)
        try:
            self._sock.sendto(line.encode("utf-8"), self._address)
        except OSError as e:
            logger.warning("statsd_send_failed", metric=name, error=str(e))

    def close(self) -> None:
        self._sock.close()


__all__ = [
    "QUERIED_PARTITIONS",
    "QUERY_PARTITION_COUNTS",
    "Counter",
    "CounterChild",
    "Labels",
    "MetricsRegistry",
    "MetricsSink",
    "RegistrySink",
    "StatsdSink",
]
