"""Tests for the collector loop.

The engine is an ``httpx.MockTransport`` serving canned overview and
detail payloads; alerts go to an in-memory channel.
"""

from unittest.mock import MagicMock

import httpx
import pytest

from prestowatch.core.cache import DedupCache
from prestowatch.core.context import CollectorContext
from prestowatch.engine import QueryEngineClient
from prestowatch.framework.alerts import Alert, ChannelType, DeliveryResult
from prestowatch.observability.metrics import QUERIED_PARTITIONS, QUERY_PARTITION_COUNTS
from prestowatch.watcher import Collector, PartitionAlertBuilder, PartitionClassifier
from tests._support.engine import input_json, query_json


class RecordingChannel:
    name = "recording"
    channel_type = ChannelType.CONSOLE

    def __init__(self, *, fail: bool = False, raises: bool = False):
        self.sent: list[Alert] = []
        self._fail = fail
        self._raises = raises

    def send(self, alert: Alert) -> DeliveryResult:
        if self._raises:
            raise RuntimeError("channel exploded")
        self.sent.append(alert)
        if self._fail:
            return DeliveryResult.fail(self.name, RuntimeError("webhook down"))
        return DeliveryResult.ok(self.name)


class FakeEngine:
    """Serves overview and detail payloads, counting detail requests."""

    def __init__(self):
        self.overview: list[dict] | None = []
        self.details: dict[str, dict] = {}
        self.overview_status = 200
        self.detail_status: dict[str, int] = {}
        self.detail_requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/v1/query":
            return httpx.Response(self.overview_status, json=self.overview)
        query_id = path.rsplit("/", 1)[-1]
        self.detail_requests.append(query_id)
        status = self.detail_status.get(query_id, 200)
        if status != 200:
            return httpx.Response(status)
        return httpx.Response(200, json=self.details[query_id])

    def add(self, query_id: str, inputs: list[dict], **kwargs) -> None:
        self.overview.append(query_json(query_id, **kwargs))
        self.details[query_id] = query_json(query_id, inputs=inputs, **kwargs)


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def context(metrics, clock):
    return CollectorContext(cache=DedupCache(clock=clock), metrics=metrics, interval_seconds=20)


def _collector(engine, channel, context, clock, *, backend=None) -> Collector:
    client = QueryEngineClient("http://presto:8080", transport=httpx.MockTransport(engine.handler))
    classifier = PartitionClassifier("hive", 30, context.metrics)
    builder = PartitionAlertBuilder(client.query_ui_url)
    return Collector(client, classifier, channel, builder, context, backend=backend, clock=clock)


@pytest.fixture
def collector(engine, channel, context, clock):
    return _collector(engine, channel, context, clock)


class TestEndToEnd:
    def test_offending_query_alerts_once(self, engine, channel, context, collector, metrics, clock):
        engine.add("Q1", [input_json(partitions=31)])

        assert collector.run_cycle() is True

        assert len(channel.sent) == 1
        assert channel.sent[0].fingerprint == "Q1"
        (attachment,) = channel.sent[0].attachments
        fields = {f.title: f.value for f in attachment.fields}
        assert fields == {"Schema": "hive.web.events", "Partitions": "31"}
        assert channel.sent[0].metadata["total_partitions"] == 31
        assert "Q1" in context.cache
        partition_rows = metrics.registry.counter(QUERIED_PARTITIONS).collect()
        assert len(partition_rows) == 31
        assert all(row["value"] == 1.0 for row in partition_rows)
        assert metrics.registry.counter(QUERY_PARTITION_COUNTS).collect() == [
            {
                "name": QUERY_PARTITION_COUNTS,
                "type": "counter",
                "labels": {"table": "hive.web.events"},
                "value": 31.0,
            }
        ]
        assert context.last_success == clock()

    def test_clean_query_is_cached_without_alert(self, engine, channel, context, collector):
        engine.add("Q1", [input_json(partitions=30)])

        collector.run_cycle()

        assert channel.sent == []
        assert "Q1" in context.cache

    def test_opted_out_and_skipped_are_cached(self, engine, channel, context, collector):
        engine.add("Q1", [input_json(partitions=99)], text="SELECT 1 -- sqlbandit:off")
        engine.add("Q2", [input_json(connector="mysql"), input_json(partitions=99)])

        collector.run_cycle()

        assert channel.sent == []
        assert "Q1" in context.cache
        assert "Q2" in context.cache

    def test_non_running_queries_ignored(self, engine, channel, context, collector):
        engine.add("Q1", [input_json(partitions=99)], state="FINISHED")

        assert collector.run_cycle() is True
        assert engine.detail_requests == []
        assert "Q1" not in context.cache


class TestDedup:
    def test_no_recheck_within_ttl(self, engine, collector, clock, monkeypatch):
        engine.add("Q1", [input_json(partitions=31)])
        check = MagicMock(wraps=collector.check_query)
        monkeypatch.setattr(collector, "check_query", check)

        collector.run_cycle()
        clock.advance(20)
        collector.run_cycle()
        clock.advance(30 * 60)
        collector.run_cycle()

        assert check.call_count == 1

    def test_recheck_after_ttl(self, engine, channel, collector, clock):
        engine.add("Q1", [input_json(partitions=31)])

        collector.run_cycle()
        clock.advance(3600)
        collector.run_cycle()

        assert engine.detail_requests == ["Q1", "Q1"]
        assert len(channel.sent) == 2


class TestFailures:
    def test_overview_failure_keeps_last_success(self, engine, context, collector, clock):
        context.last_success = clock() - 5
        engine.overview_status = 503

        assert collector.run_cycle() is False
        assert context.last_success == clock() - 5

    def test_detail_failure_aborts_cycle(self, engine, channel, context, collector, clock):
        engine.add("Q1", [input_json(partitions=31)])
        engine.add("Q2", [input_json(partitions=31)])
        engine.detail_status["Q1"] = 500
        context.last_success = clock() - 5

        assert collector.run_cycle() is False

        assert engine.detail_requests == ["Q1"]
        assert channel.sent == []
        assert len(context.cache) == 0
        assert context.last_success == clock() - 5

    def test_vanished_query_aborts_cycle(self, engine, context, collector):
        engine.add("Q1", [])
        engine.detail_status["Q1"] = 404

        assert collector.run_cycle() is False
        assert "Q1" not in context.cache

    def test_earlier_queries_stay_cached_after_abort(self, engine, context, collector):
        engine.add("Q1", [input_json(partitions=1)])
        engine.add("Q2", [])
        engine.detail_status["Q2"] = 500

        assert collector.run_cycle() is False
        assert "Q1" in context.cache
        assert "Q2" not in context.cache

    def test_delivery_failure_still_caches(self, engine, context, clock):
        channel = RecordingChannel(fail=True)
        collector = _collector(engine, channel, context, clock)
        engine.add("Q1", [input_json(partitions=31)])

        assert collector.run_cycle() is True
        assert len(channel.sent) == 1
        assert "Q1" in context.cache

    def test_channel_exception_still_caches(self, engine, context, clock):
        collector = _collector(engine, RecordingChannel(raises=True), context, clock)
        engine.add("Q1", [input_json(partitions=31)])

        assert collector.run_cycle() is True
        assert "Q1" in context.cache


class TestLifecycle:
    def test_start_marks_success_and_schedules(self, engine, channel, context, clock):
        backend = MagicMock()
        collector = _collector(engine, channel, context, clock, backend=backend)

        collector.start()

        assert context.last_success == clock()
        backend.start.assert_called_once_with(collector.run_cycle, interval_seconds=20, run_immediately=True)

        collector.stop()
        backend.stop.assert_called_once_with()
