"""Tests for alert channels: slack, console.

Uses httpx.MockTransport to avoid real network calls. Covers:
- Init and properties
- Payload building
- send() success and failure paths
"""

import json
from datetime import datetime

import httpx

from prestowatch.core.errors import AlertDeliveryError
from prestowatch.framework.alerts import (
    Alert,
    AlertAttachment,
    AlertChannel,
    AlertSeverity,
    ChannelType,
    ConsoleChannel,
    SlackChannel,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _alert(**overrides) -> Alert:
    defaults = dict(
        severity=AlertSeverity.WARNING,
        title="Query Q1 scans too many partitions",
        message="Presto query <http://presto/ui/query.html?Q1> is searching through more than *31* partitions total!",
        source="prestowatch.collector",
        attachments=[
            AlertAttachment(color="warning")
            .add_field("Schema", "hive.web.events", short=True)
            .add_field("Partitions", 31, short=True)
        ],
        created_at=datetime(2026, 1, 15, 12, 0, 0),
    )
    defaults.update(overrides)
    return Alert(**defaults)


def _slack(handler, **kwargs) -> SlackChannel:
    return SlackChannel("slack", "https://hooks.slack.test/T/B/X", transport=httpx.MockTransport(handler), **kwargs)


# ===========================================================================
# Alert
# ===========================================================================


class TestAlert:
    def test_default_fingerprint(self):
        alert = _alert()
        assert alert.fingerprint == "WARNING|prestowatch.collector|Query Q1 scans too many partitions"

    def test_explicit_fingerprint(self):
        assert _alert(fingerprint="Q1").fingerprint == "Q1"

    def test_field_values_are_strings(self):
        field = _alert().attachments[0].fields[1]
        assert (field.title, field.value, field.short) == ("Partitions", "31", True)


# ===========================================================================
# Slack
# ===========================================================================


class TestSlackChannel:
    def test_init(self):
        ch = SlackChannel("slack_alerts", "https://hooks.slack.test/x")
        assert ch.name == "slack_alerts"
        assert ch.channel_type == ChannelType.SLACK
        assert isinstance(ch, AlertChannel)
        ch.close()

    def test_payload(self):
        ch = _slack(lambda r: httpx.Response(200), channel="#data", icon_emoji=":sql_bandit:")
        payload = ch._build_payload(_alert())
        assert payload["text"].startswith("Presto query <http://presto/ui/query.html?Q1>")
        assert payload["username"] == "SQLBandit"
        assert payload["channel"] == "#data"
        assert payload["icon_emoji"] == ":sql_bandit:"
        assert payload["attachments"] == [
            {
                "color": "warning",
                "fields": [
                    {"title": "Schema", "value": "hive.web.events", "short": True},
                    {"title": "Partitions", "value": "31", "short": True},
                ],
            }
        ]

    def test_payload_omits_unset_optionals(self):
        payload = _slack(lambda r: httpx.Response(200))._build_payload(_alert())
        assert "icon_emoji" not in payload
        assert "channel" not in payload

    def test_send_success(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="ok")

        result = _slack(handler).send(_alert())

        assert result.success is True
        assert result.channel_name == "slack"
        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "https://hooks.slack.test/T/B/X"
        assert json.loads(seen[0].content)["attachments"][0]["color"] == "warning"

    def test_send_http_error(self):
        result = _slack(lambda r: httpx.Response(500, text="invalid_payload")).send(_alert())

        assert result.success is False
        assert isinstance(result.error, AlertDeliveryError)
        assert result.error.context.http_status == 500
        assert "invalid_payload" in result.message

    def test_send_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = _slack(handler).send(_alert())

        assert result.success is False
        assert isinstance(result.error, AlertDeliveryError)
        assert result.error.retryable is True


# ===========================================================================
# Console
# ===========================================================================


class TestConsoleChannel:
    def test_prints_fields(self, capsys):
        ch = ConsoleChannel(color=False)
        result = ch.send(_alert())

        out = capsys.readouterr().out
        assert result.success is True
        assert result.channel_name == "console"
        assert "[WARNING] Query Q1 scans too many partitions" in out
        assert "Schema: hive.web.events" in out
        assert "Partitions: 31" in out

    def test_is_channel(self):
        ch = ConsoleChannel()
        assert ch.channel_type == ChannelType.CONSOLE
        assert isinstance(ch, AlertChannel)
