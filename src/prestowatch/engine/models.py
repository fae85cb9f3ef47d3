"""
Query records returned by the Presto coordinator.

The same ``Query`` model decodes both the lightweight overview served by
``/v1/query`` and the full detail served by ``/v1/query/{id}``; overview
records simply arrive without ``inputs``.

Only the fields the watcher reads are modelled. Unknown fields are ignored
so engine upgrades that add keys do not break decoding.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QueryState(str, Enum):
    """Execution states reported by the engine."""

    QUEUED = "QUEUED"
    WAITING_FOR_RESOURCES = "WAITING_FOR_RESOURCES"
    DISPATCHING = "DISPATCHING"
    PLANNING = "PLANNING"
    STARTING = "STARTING"
    RUNNING = "RUNNING"
    BLOCKED = "BLOCKED"
    FINISHING = "FINISHING"
    FINISHED = "FINISHED"
    FAILED = "FAILED"


class _EngineModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class ConnectorInfo(_EngineModel):
    """Partitions scanned by one input. ``truncated`` means the list is partial."""

    partition_ids: list[str] = Field(default_factory=list, alias="partitionIds")
    truncated: bool = False

    @field_validator("partition_ids", mode="before")
    @classmethod
    def _null_partitions(cls, value):
        return [] if value is None else value

    @property
    def partition_count(self) -> int:
        return len(self.partition_ids)


class QueryInput(_EngineModel):
    """One data source read by a query."""

    connector_id: str = Field(alias="connectorId")
    schema_name: str = Field(default="", alias="schema")
    table: str = ""
    connector_info: ConnectorInfo = Field(default_factory=ConnectorInfo, alias="connectorInfo")

    @field_validator("connector_info", mode="before")
    @classmethod
    def _null_connector_info(cls, value):
        # non-hive connectors report no connector info at all
        return {} if value is None else value

    @property
    def table_identity(self) -> str:
        """``connector.schema.table``, the label used in metrics and alerts."""
        return f"{self.connector_id}.{self.schema_name}.{self.table}"

    @property
    def partition_count(self) -> int:
        return self.connector_info.partition_count


class Session(_EngineModel):
    user: str = ""


class Query(_EngineModel):
    """A query as seen by the engine."""

    query_id: str = Field(alias="queryId")
    state: str
    query: str = ""
    session: Session = Field(default_factory=Session)
    inputs: list[QueryInput] = Field(default_factory=list)

    @property
    def user(self) -> str:
        return self.session.user

    @property
    def is_running(self) -> bool:
        return self.state == QueryState.RUNNING.value


__all__ = [
    "ConnectorInfo",
    "Query",
    "QueryInput",
    "QueryState",
    "Session",
]
