"""
Partition threshold classifier.

Decides, for one query detail record, which inputs scan more partitions
than allowed, and emits partition metrics along the way.

Evaluation order for a query:

1. Opt-out marker in the query text → ``OPTED_OUT``; nothing is evaluated
   and no metrics are emitted.
2. Inputs are walked in order. The first input whose connector differs
   from the configured one ends evaluation with ``SKIPPED_CONNECTOR``:
   later inputs are never looked at and the query cannot alert.
3. For each matching input, one ``queried_partitions`` increment per
   partition id; if the count is strictly greater than the threshold, one
   ``query_partition_counts`` increment by the count and the input is
   recorded as offending.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from prestowatch.engine.models import Query, QueryInput
from prestowatch.framework.logging import get_logger
from prestowatch.observability.metrics import (
    QUERIED_PARTITIONS,
    QUERY_PARTITION_COUNTS,
    MetricsSink,
)
from prestowatch.watcher.annotations import has_opt_out

logger = get_logger(__name__)


class ClassificationStatus(str, Enum):
    EVALUATED = "evaluated"
    SKIPPED_CONNECTOR = "skipped_connector"
    OPTED_OUT = "opted_out"


@dataclass
class ClassificationResult:
    """Outcome of classifying one query."""

    status: ClassificationStatus
    offending: list[QueryInput] = field(default_factory=list)

    @property
    def should_alert(self) -> bool:
        return self.status is ClassificationStatus.EVALUATED and bool(self.offending)

    @property
    def total_partitions(self) -> int:
        return sum(i.partition_count for i in self.offending)

    @property
    def truncated(self) -> bool:
        """True if any offending count is only a lower bound."""
        return any(i.connector_info.truncated for i in self.offending)


class PartitionClassifier:
    """Flags inputs scanning more than ``threshold`` partitions.

    Args:
        connector: Connector id whose inputs are checked (e.g. ``hive``).
        threshold: Maximum allowed partitions per input.
        metrics: Sink for partition counters.
        opt_out_marker: Query-text token that disables checking.
    """

    def __init__(
        self,
        connector: str,
        threshold: int,
        metrics: MetricsSink,
        *,
        opt_out_marker: str = "sqlbandit:off",
    ):
        self.connector = connector
        self.threshold = threshold
        self._metrics = metrics
        self._opt_out_marker = opt_out_marker

    def classify(self, query: Query) -> ClassificationResult:
        if has_opt_out(query.query, self._opt_out_marker):
            logger.debug("query_opted_out", query_id=query.query_id)
            return ClassificationResult(ClassificationStatus.OPTED_OUT)

        offending: list[QueryInput] = []
        for idx, query_input in enumerate(query.inputs):
            if query_input.connector_id != self.connector:
                logger.debug(
                    "connector_mismatch",
                    query_id=query.query_id,
                    input_index=idx,
                    connector=query_input.connector_id,
                    expected=self.connector,
                )
                return ClassificationResult(ClassificationStatus.SKIPPED_CONNECTOR)

            table = query_input.table_identity
            for partition in query_input.connector_info.partition_ids:
                self._metrics.incr_counter(QUERIED_PARTITIONS, 1.0, {"table": table, "partition": partition})

            count = query_input.partition_count
            if count > self.threshold:
                logger.warning(
                    "partition_threshold_exceeded",
                    query_id=query.query_id,
                    input_index=idx,
                    table=table,
                    partitions=count,
                    truncated=query_input.connector_info.truncated,
                )
                self._metrics.incr_counter(QUERY_PARTITION_COUNTS, float(count), {"table": table})
                offending.append(query_input)

        return ClassificationResult(ClassificationStatus.EVALUATED, offending)


__all__ = [
    "ClassificationResult",
    "ClassificationStatus",
    "PartitionClassifier",
]
