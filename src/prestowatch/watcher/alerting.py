"""Builds the alert sent when a query scans too many partitions."""

from __future__ import annotations

from collections.abc import Callable

from prestowatch.engine.models import Query
from prestowatch.framework.alerts import Alert, AlertAttachment, AlertSeverity
from prestowatch.watcher.annotations import parse_reporting_metadata
from prestowatch.watcher.classifier import ClassificationResult

INPUT_COLOR = "warning"
REPORTING_COLOR = "#439FE0"


class PartitionAlertBuilder:
    """Turns a classification result into an ``Alert``.

    Args:
        query_url: Maps a query id to its page in the engine UI.
        opt_out_marker: Shown in the message so readers know how to silence it.
        reporting_user: Session user whose queries carry reporting metadata.
    """

    def __init__(
        self,
        query_url: Callable[[str], str],
        *,
        opt_out_marker: str = "sqlbandit:off",
        reporting_user: str = "mode",
    ):
        self._query_url = query_url
        self._opt_out_marker = opt_out_marker
        self._reporting_user = reporting_user

    def build(self, query: Query, result: ClassificationResult) -> Alert:
        attachments = [
            AlertAttachment(color=INPUT_COLOR)
            .add_field("Schema", offending.table_identity, short=True)
            .add_field("Partitions", offending.partition_count, short=True)
            for offending in result.offending
        ]

        if self._reporting_user and query.user == self._reporting_user:
            metadata = parse_reporting_metadata(query.query)
            if metadata is not None:
                attachments.append(
                    AlertAttachment(color=REPORTING_COLOR)
                    .add_field("Mode Username", metadata.user, short=True)
                    .add_field("Scheduled?", str(metadata.scheduled).lower(), short=True)
                    .add_field("URL", metadata.url)
                )

        bound = "at least " if result.truncated else ""
        title = f"Query {query.query_id} scans too many partitions"
        message = (
            ":bomb: :bomb: :bomb:\n"
            f"Presto query <{self._query_url(query.query_id)}> is searching through more than "
            f"*{bound}{result.total_partitions}* partitions total! :sql_bandit:\n"
            "Make sure your query has a filter for `date` and not `received_at`!\n"
            "\n\n"
            f"*If you want to disable this alert for your query*, add `-- {self._opt_out_marker}` "
            "somewhere in your query."
        )

        return Alert(
            severity=AlertSeverity.WARNING,
            title=title,
            message=message,
            source="prestowatch.collector",
            attachments=attachments,
            metadata={
                "query_id": query.query_id,
                "user": query.user,
                "total_partitions": result.total_partitions,
                "truncated": result.truncated,
            },
            fingerprint=query.query_id,
        )


__all__ = ["PartitionAlertBuilder"]
