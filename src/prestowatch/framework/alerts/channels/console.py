"""Console alert channel for dry runs."""

from __future__ import annotations

from prestowatch.framework.alerts.protocol import (
    Alert,
    AlertSeverity,
    ChannelType,
    DeliveryResult,
)

_COLORS = {
    AlertSeverity.INFO: "\033[34m",
    AlertSeverity.WARNING: "\033[33m",
    AlertSeverity.ERROR: "\033[31m",
    AlertSeverity.CRITICAL: "\033[35m",
}
_RESET = "\033[0m"


class ConsoleChannel:
    """
    Console output channel.

    Prints alerts to stdout instead of posting them, so a new threshold can
    be tried against a live engine without notifying anyone.
    """

    channel_type = ChannelType.CONSOLE

    def __init__(self, name: str = "console", *, color: bool = True):
        self.name = name
        self._color = color

    def send(self, alert: Alert) -> DeliveryResult:
        """Print alert to console."""
        color = _COLORS.get(alert.severity, "") if self._color else ""
        reset = _RESET if self._color else ""

        print(f"{color}[{alert.severity.value}] {alert.title}{reset}")
        print(f"  Source: {alert.source}")
        print(f"  Message: {alert.message}")
        for attachment in alert.attachments:
            for f in attachment.fields:
                print(f"  {f.title}: {f.value}")
        print()

        return DeliveryResult.ok(self.name)
