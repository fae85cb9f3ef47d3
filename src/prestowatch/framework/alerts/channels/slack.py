"""Slack webhook alert channel."""

from __future__ import annotations

from typing import Any

import httpx

from prestowatch.core.errors import AlertDeliveryError
from prestowatch.framework.alerts.protocol import Alert, ChannelType, DeliveryResult


class SlackChannel:
    """
    Slack incoming-webhook channel.

    The alert message becomes the message text; each ``AlertAttachment``
    becomes a legacy Slack attachment with its fields. ``icon_emoji`` and
    ``channel`` are only sent when set, so the webhook defaults apply
    otherwise.
    """

    channel_type = ChannelType.SLACK

    def __init__(
        self,
        name: str,
        webhook_url: str,
        *,
        channel: str | None = None,
        username: str = "SQLBandit",
        icon_emoji: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.name = name
        self._webhook_url = webhook_url
        self._channel = channel
        self._username = username
        self._icon_emoji = icon_emoji
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def _build_payload(self, alert: Alert) -> dict[str, Any]:
        attachments = [
            {
                "color": attachment.color,
                "fields": [
                    {"title": f.title, "value": f.value, "short": f.short}
                    for f in attachment.fields
                ],
            }
            for attachment in alert.attachments
        ]

        payload: dict[str, Any] = {
            "text": alert.message,
            "username": self._username,
            "attachments": attachments,
        }
        if self._icon_emoji:
            payload["icon_emoji"] = self._icon_emoji
        if self._channel:
            payload["channel"] = self._channel

        return payload

    def send(self, alert: Alert) -> DeliveryResult:
        """Post the alert to the webhook."""
        payload = self._build_payload(alert)

        try:
            response = self._client.post(self._webhook_url, json=payload)
        except httpx.HTTPError as e:
            return DeliveryResult.fail(self.name, AlertDeliveryError(f"Slack webhook unreachable: {e}", cause=e))

        if not response.is_success:
            error = AlertDeliveryError(f"Slack webhook answered HTTP {response.status_code}: {response.text}")
            return DeliveryResult.fail(self.name, error.with_context(http_status=response.status_code))

        return DeliveryResult.ok(self.name, message=response.text)

    def close(self) -> None:
        self._client.close()
