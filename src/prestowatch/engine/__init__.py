"""Presto coordinator client and query models."""

from prestowatch.engine.client import QueryEngineClient
from prestowatch.engine.models import ConnectorInfo, Query, QueryInput, QueryState, Session

__all__ = [
    "ConnectorInfo",
    "Query",
    "QueryEngineClient",
    "QueryInput",
    "QueryState",
    "Session",
]
