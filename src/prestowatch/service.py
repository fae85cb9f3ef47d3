"""
Composition root for the daemon.

``WatcherService.from_settings()`` wires the engine client, metrics sink,
dedup cache, classifier, alert channel, collector and health app from one
validated ``WatcherSettings``; ``run()`` starts the collector thread and
serves the health app until uvicorn exits.
"""

from __future__ import annotations

from dataclasses import dataclass

import uvicorn
from fastapi import FastAPI

from prestowatch.api.app import create_app
from prestowatch.core.cache import DedupCache
from prestowatch.core.context import CollectorContext
from prestowatch.core.health import HealthReporter
from prestowatch.core.settings import WatcherSettings
from prestowatch.engine.client import QueryEngineClient
from prestowatch.framework.alerts import AlertChannel, ConsoleChannel, SlackChannel
from prestowatch.framework.logging import get_logger
from prestowatch.observability.metrics import MetricsSink, StatsdSink
from prestowatch.watcher.alerting import PartitionAlertBuilder
from prestowatch.watcher.classifier import PartitionClassifier
from prestowatch.watcher.collector import Collector

logger = get_logger(__name__)


@dataclass
class WatcherService:
    settings: WatcherSettings
    client: QueryEngineClient
    channel: AlertChannel
    metrics: MetricsSink
    collector: Collector
    app: FastAPI

    @classmethod
    def from_settings(
        cls,
        settings: WatcherSettings,
        *,
        dry_run: bool = False,
        metrics: MetricsSink | None = None,
    ) -> WatcherService:
        """Wire every component.

        Raises:
            ConfigError: If the metrics sink address is unusable.
        """
        if metrics is None:
            host, port = settings.statsd_address
            metrics = StatsdSink(host, port)

        cache = DedupCache(
            on_evict=lambda key, value: logger.debug("evicted_from_cache", query_id=key, cached_at=value)
        )
        context = CollectorContext(cache=cache, metrics=metrics, interval_seconds=settings.update_interval)

        client = QueryEngineClient(settings.presto_url, timeout=settings.request_timeout)
        if dry_run:
            channel: AlertChannel = ConsoleChannel()
        else:
            channel = SlackChannel(
                "slack",
                settings.slack_url,
                username=settings.slack_username,
                icon_emoji=settings.slack_icon_emoji or None,
                timeout=settings.request_timeout,
            )

        classifier = PartitionClassifier(
            settings.connector,
            settings.max_partitions,
            metrics,
            opt_out_marker=settings.opt_out_marker,
        )
        alert_builder = PartitionAlertBuilder(
            client.query_ui_url,
            opt_out_marker=settings.opt_out_marker,
            reporting_user=settings.reporting_user,
        )
        collector = Collector(client, classifier, channel, alert_builder, context)
        app = create_app(HealthReporter(context))

        return cls(
            settings=settings,
            client=client,
            channel=channel,
            metrics=metrics,
            collector=collector,
            app=app,
        )

    def run(self) -> None:
        """Start collecting and serve health checks until shutdown."""
        self.collector.start()
        logger.info("collecting", presto_url=self.settings.presto_url, health_port=self.settings.port)
        try:
            uvicorn.run(self.app, host="0.0.0.0", port=self.settings.port, log_config=None, access_log=False)
        finally:
            self.close()

    def close(self) -> None:
        self.collector.stop()
        self.client.close()
        for resource in (self.channel, self.metrics):
            close = getattr(resource, "close", None)
            if close is not None:
                close()
        logger.info("stopped")


__all__ = ["WatcherService"]
