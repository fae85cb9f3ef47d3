"""
Collector loop.

One cycle:

1. List running queries. On error, log and end the cycle without touching
   the last-success timestamp.
2. For each RUNNING query not in the dedup cache, fetch its detail,
   classify it and alert if any input is offending. A failed detail fetch
   ends the whole cycle. Every query checked without error is written to
   the cache, clean or not, so it is not looked at again inside the window.
3. Mark success on the shared context.

Cycles run on a single scheduler thread, once at start and then every
``interval_seconds``, so they never overlap and the cache needs no lock.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from prestowatch.core.context import CollectorContext
from prestowatch.core.errors import WatcherError
from prestowatch.core.scheduling import SchedulerBackend, ThreadSchedulerBackend
from prestowatch.engine.client import QueryEngineClient
from prestowatch.engine.models import Query
from prestowatch.framework.alerts import AlertChannel
from prestowatch.framework.logging import get_logger, log_step, new_cycle_id, push_context
from prestowatch.watcher.alerting import PartitionAlertBuilder
from prestowatch.watcher.classifier import ClassificationResult, PartitionClassifier

logger = get_logger(__name__)


class Collector:
    """Poll → classify → dedupe → alert."""

    def __init__(
        self,
        client: QueryEngineClient,
        classifier: PartitionClassifier,
        channel: AlertChannel,
        alert_builder: PartitionAlertBuilder,
        context: CollectorContext,
        *,
        backend: SchedulerBackend | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._classifier = classifier
        self._channel = channel
        self._alert_builder = alert_builder
        self._context = context
        self._backend = backend or ThreadSchedulerBackend()
        self._clock = clock

    @property
    def context(self) -> CollectorContext:
        return self._context

    def start(self) -> None:
        """Run one cycle now, then one every interval, on the backend thread."""
        self._context.mark_success(self._clock())
        self._backend.start(
            self.run_cycle,
            interval_seconds=self._context.interval_seconds,
            run_immediately=True,
        )

    def stop(self) -> None:
        self._backend.stop()

    def run_cycle(self) -> bool:
        """Run one poll cycle. Returns True if it completed without error."""
        token = push_context(cycle_id=new_cycle_id())
        try:
            with log_step("collector.cycle") as timer:
                completed = self._collect(timer)
        finally:
            token.restore()

        if completed:
            self._context.mark_success(self._clock())
        return completed

    def _collect(self, timer) -> bool:
        try:
            queries = self._client.list_running_queries()
        except WatcherError as e:
            logger.error(
                "overview_failed",
                retry_in_seconds=self._context.interval_seconds,
                **e.to_dict(),
            )
            return False

        cache = self._context.cache
        checked = 0
        for query in queries:
            if not query.is_running:
                continue

            cached_at = cache.get_if_present(query.query_id)
            if cached_at is not None:
                logger.debug("query_cached", query_id=query.query_id, cached_at=cached_at)
                continue

            try:
                self.check_query(query)
            except WatcherError as e:
                logger.error("query_check_failed", query_id=query.query_id, **e.to_dict())
                return False

            cache.set(query.query_id, self._clock())
            checked += 1

        timer.add_metric("running", len(queries))
        timer.add_metric("checked", checked)
        return True

    def check_query(self, query: Query) -> ClassificationResult:
        """Fetch detail for ``query``, classify it, and alert if it offends.

        Raises:
            WatcherError: If the detail fetch fails.
        """
        token = push_context(query_id=query.query_id)
        try:
            logger.debug("checking_query")
            detail = self._client.get_query_detail(query.query_id)
            result = self._classifier.classify(detail)
            if result.should_alert:
                self._send_alert(detail, result)
            return result
        finally:
            token.restore()

    def _send_alert(self, query: Query, result: ClassificationResult) -> None:
        alert = self._alert_builder.build(query, result)
        try:
            delivery = self._channel.send(alert)
        except Exception:
            logger.exception("alert_send_raised", channel=self._channel.name)
            return

        if delivery.success:
            logger.info(
                "alert_sent",
                channel=delivery.channel_name,
                offending_inputs=len(result.offending),
                total_partitions=result.total_partitions,
            )
        else:
            logger.error("alert_delivery_failed", channel=delivery.channel_name, error=delivery.message)


__all__ = ["Collector"]
