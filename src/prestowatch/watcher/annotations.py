"""
Conventions embedded in query text.

Two conventions are recognised:

Opt-out marker
    Any occurrence of the marker token (default ``sqlbandit:off``) anywhere
    in the query text, typically as ``-- sqlbandit:off``.

Reporting-tool metadata
    Queries submitted by the reporting tool end with a SQL line comment
    holding a JSON object::

        SELECT ...
        -- {"user": "jdoe", "url": "https://reports/abc", "scheduled": true}

    Only the last non-blank line is inspected. Anything that is not a
    ``--`` comment containing a JSON object yields ``None``.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, ValidationError

COMMENT_PREFIX = "--"


class ReportingMetadata(BaseModel):
    """Who ran a reporting-tool query, and from where."""

    model_config = ConfigDict(extra="ignore")

    user: str = ""
    url: str = ""
    scheduled: bool = False


def has_opt_out(query_text: str, marker: str) -> bool:
    """True if the query text carries the opt-out marker."""
    return bool(marker) and marker in query_text


def parse_reporting_metadata(query_text: str) -> ReportingMetadata | None:
    """Decode the trailing metadata comment, or ``None`` if absent or malformed."""
    lines = [line.strip() for line in query_text.splitlines() if line.strip()]
    if not lines:
        return None

    last = lines[-1]
    if not last.startswith(COMMENT_PREFIX):
        return None

    body = last[len(COMMENT_PREFIX):].strip()
    try:
        raw = json.loads(body)
    except ValueError:
        return None
    if not isinstance(raw, dict):
        return None

    try:
        return ReportingMetadata.model_validate(raw)
    except ValidationError:
        return None


__all__ = [
    "COMMENT_PREFIX",
    "ReportingMetadata",
    "has_opt_out",
    "parse_reporting_metadata",
]
