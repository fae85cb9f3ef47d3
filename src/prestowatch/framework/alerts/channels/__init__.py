"""Alert channel implementations."""

from prestowatch.framework.alerts.channels.console import ConsoleChannel
from prestowatch.framework.alerts.channels.slack import SlackChannel

__all__ = [
    "ConsoleChannel",
    "SlackChannel",
]
