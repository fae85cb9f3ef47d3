"""
Alerting protocol and data classes.

Defines the interface for alert channels and the alert payload. Concrete
channels live in ``channels/``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class AlertSeverity(str, Enum):
    """Alert severity levels."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ChannelType(str, Enum):
    """Alert channel types."""

    SLACK = "slack"
    CONSOLE = "console"


@dataclass
class AlertField:
    """A titled value shown inside an attachment."""

    title: str
    value: str
    short: bool = False


@dataclass
class AlertAttachment:
    """A colored block of fields attached to an alert."""

    color: str
    fields: list[AlertField] = field(default_factory=list)

    def add_field(self, title: str, value: Any, *, short: bool = False) -> AlertAttachment:
        self.fields.append(AlertField(title=title, value=str(value), short=short))
        return self


@dataclass
class Alert:
    """
    An alert to be sent to a channel.

    ``fingerprint`` identifies the condition being alerted on; for partition
    alerts it is the query id.
    """

    severity: AlertSeverity
    title: str
    message: str
    source: str

    attachments: list[AlertAttachment] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)
    fingerprint: str | None = None

    def __post_init__(self):
        if self.fingerprint is None:
            self.fingerprint = "|".join([self.severity.value, self.source, self.title])


@dataclass
class DeliveryResult:
    """Result of an alert delivery attempt."""

    channel_name: str
    success: bool
    message: str | None = None
    error: Exception | None = None
    delivered_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def ok(cls, channel_name: str, message: str | None = None) -> DeliveryResult:
        return cls(channel_name=channel_name, success=True, message=message)

    @classmethod
    def fail(cls, channel_name: str, error: Exception) -> DeliveryResult:
        return cls(channel_name=channel_name, success=False, error=error, message=str(error))


@runtime_checkable
class AlertChannel(Protocol):
    """
    Protocol for alert channels.

    Implementations must provide:
    - name: Unique channel identifier
    - channel_type: Type classification
    - send(): Deliver an alert, reporting failure in the result rather than raising
    """

    @property
    def name(self) -> str:
        ...

    @property
    def channel_type(self) -> ChannelType:
        ...

    def send(self, alert: Alert) -> DeliveryResult:
        ...


__all__ = [
    "AlertSeverity",
    "ChannelType",
    "AlertField",
    "AlertAttachment",
    "Alert",
    "DeliveryResult",
    "AlertChannel",
]
