"""
Alerting package.

Provides the alert payload and the channels that deliver it.
"""

from prestowatch.framework.alerts.channels import ConsoleChannel, SlackChannel
from prestowatch.framework.alerts.protocol import (
    Alert,
    AlertAttachment,
    AlertChannel,
    AlertField,
    AlertSeverity,
    ChannelType,
    DeliveryResult,
)

__all__ = [
    "AlertSeverity",
    "ChannelType",
    "Alert",
    "AlertAttachment",
    "AlertField",
    "DeliveryResult",
    "AlertChannel",
    "ConsoleChannel",
    "SlackChannel",
]
