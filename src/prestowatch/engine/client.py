"""
HTTP client for the Presto coordinator REST API.

Endpoints used:
    GET {base_url}/v1/query?state=running   → JSON array of query overviews
    GET {base_url}/v1/query/{queryId}       → JSON query detail (with inputs)

Errors are translated into the watcher taxonomy and never retried here;
the collector decides what a failure means for the cycle.

    httpx.TransportError / TimeoutException  → EngineUnreachableError
    HTTP 404, empty or null detail body      → QueryNotFoundError
    any other non-2xx status                 → EngineUnreachableError
    invalid JSON or unexpected shape         → MalformedResponseError
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from prestowatch.core.errors import (
    EngineUnreachableError,
    MalformedResponseError,
    QueryNotFoundError,
)
from prestowatch.engine.models import Query, QueryState
from prestowatch.framework.logging import get_logger

logger = get_logger(__name__)

_QUERY_LIST = TypeAdapter(list[Query])


class QueryEngineClient:
    """Read-only client for query overview and detail.

    Example:
        with QueryEngineClient("http://presto:8080", timeout=10) as client:
            for query in client.list_running_queries():
                detail = client.get_query_detail(query.query_id)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def list_running_queries(self) -> list[Query]:
        """Fetch the overview of running queries.

        The engine filters server-side, but overview records are still
        checked with ``Query.is_running`` by callers.
        """
        payload = self._get_json("/v1/query", params={"state": QueryState.RUNNING.value.lower()})
        if payload is None:
            return []
        try:
            queries = _QUERY_LIST.validate_python(payload)
        except ValidationError as e:
            raise MalformedResponseError("Query overview did not match the expected shape", cause=e).with_context(
                url=f"{self._base_url}/v1/query"
            ) from e
        logger.debug("received_overview", count=len(queries))
        return queries

    def get_query_detail(self, query_id: str) -> Query:
        """Fetch the full record, including inputs, for one query."""
        path = f"/v1/query/{query_id}"
        payload = self._get_json(path, query_id=query_id)
        if not payload:
            raise QueryNotFoundError(f"Query {query_id} returned an empty detail record").with_context(
                query_id=query_id
            )
        try:
            query = Query.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponseError(f"Detail for query {query_id} did not match the expected shape", cause=e).with_context(
                query_id=query_id, url=f"{self._base_url}{path}"
            ) from e
        logger.debug("received_query_detail", query_id=query_id, inputs=len(query.inputs))
        return query

    def query_ui_url(self, query_id: str) -> str:
        """Link to the query page in the engine web UI."""
        return f"{self._base_url}/ui/query.html?{query_id}"

    def _get_json(self, path: str, *, params: dict[str, str] | None = None, query_id: str | None = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise EngineUnreachableError(f"Request to {url} failed: {e}", cause=e).with_context(
                url=url, query_id=query_id
            ) from e

        if response.status_code == 404 and query_id is not None:
            raise QueryNotFoundError(f"Query {query_id} not found").with_context(
                query_id=query_id, url=url, http_status=404
            )
        if not response.is_success:
            raise EngineUnreachableError(f"Engine answered HTTP {response.status_code}").with_context(
                url=url, http_status=response.status_code, query_id=query_id
            )

        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response from {url} is not JSON", cause=e).with_context(
                url=url, query_id=query_id
            ) from e

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> QueryEngineClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


__all__ = ["QueryEngineClient"]
