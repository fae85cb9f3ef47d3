"""
Structured error types for prestowatch.

Every failure the watcher can hit during a poll cycle or at startup is
raised as a ``WatcherError`` subclass. Errors carry:

- **Category:** What kind of error (network, parse, source, config)
- **Retryable:** Whether the next poll cycle may succeed where this one failed
- **Context:** Structured metadata (query id, URL, HTTP status)
- **Cause:** Chained underlying exception for root cause analysis

Architecture:
    ::

        WatcherError
        ├── EngineUnreachableError   (NETWORK, retryable)
        ├── MalformedResponseError   (PARSE)
        ├── QueryNotFoundError       (SOURCE)
        ├── AlertDeliveryError       (NETWORK, retryable)
        └── ConfigError              (CONFIG, fatal at startup)
            ├── MissingConfigError
            └── InvalidConfigError

Propagation:
    Unreachable / Malformed / NotFound abort the current poll cycle only.
    ConfigError is fatal and only raised during startup.

Usage:
    from prestowatch.core.errors import EngineUnreachableError

    try:
        response = client.get(url)
    except httpx.TransportError as e:
        raise EngineUnreachableError("engine did not answer", cause=e).with_context(url=url)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    NETWORK = "NETWORK"
    PARSE = "PARSE"
    SOURCE = "SOURCE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured context attached to a WatcherError.

    Attributes:
        query_id: Engine query id being processed
        url: URL that was being accessed
        http_status: HTTP status code if applicable
        metadata: Additional key-value pairs
    """

    query_id: str | None = None
    url: str | None = None
    http_status: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["query_id", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class WatcherError(Exception):
    """
    Base exception for all prestowatch errors.

    Subclasses set ``default_category`` and ``default_retryable`` so raising
    sites only need a message.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> WatcherError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryNotFoundError("gone").with_context(query_id="20240101_000000_00001_abcde")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# POLL CYCLE ERRORS
# =============================================================================


class EngineUnreachableError(WatcherError):
    """The query engine (or another outbound peer) could not be reached or answered non-2xx."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class MalformedResponseError(WatcherError):
    """A response body did not decode into the expected shape."""

    default_category = ErrorCategory.PARSE
    default_retryable = False


class QueryNotFoundError(WatcherError):
    """The engine no longer knows the requested query id."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False


class AlertDeliveryError(WatcherError):
    """An alert channel failed to deliver a message."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


# =============================================================================
# CONFIGURATION ERRORS (fatal at startup)
# =============================================================================


class ConfigError(WatcherError):
    """Missing or invalid startup configuration."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingConfigError(ConfigError):
    """A required setting was not provided."""

    def __init__(self, key: str, message: str | None = None):
        super().__init__(message or f"Missing required configuration: {key}")
        self.key = key


class InvalidConfigError(ConfigError):
    """A setting was provided but could not be used."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        super().__init__(message or f"Invalid value for {key}: {value!r}")
        self.key = key
        self.value = value


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "WatcherError",
    "EngineUnreachableError",
    "MalformedResponseError",
    "QueryNotFoundError",
    "AlertDeliveryError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
]
