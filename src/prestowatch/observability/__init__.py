"""Metrics for prestowatch."""

from prestowatch.observability.metrics import (
    QUERIED_PARTITIONS,
    QUERY_PARTITION_COUNTS,
    MetricsRegistry,
    MetricsSink,
    RegistrySink,
    StatsdSink,
)

__all__ = [
    "QUERIED_PARTITIONS",
    "QUERY_PARTITION_COUNTS",
    "MetricsRegistry",
    "MetricsSink",
    "RegistrySink",
    "StatsdSink",
]
