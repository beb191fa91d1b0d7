# meresahar/services/listing.py
from typing import Any, Mapping, Optional

from meresahar.db.store import IssueStore
from meresahar.models.issue import DEFAULT_STATUS, DEFAULT_URGENCY
from meresahar.schemas.issue import IssueSummary
from meresahar.services.filters import build_filter_query


def summarize(row: Mapping[str, Any]) -> IssueSummary:
    """Turns a projected row into an IssueSummary, defaulting null status/urgency."""
    return IssueSummary(
        id=row["id"],
        username=row.get("username"),
        category=row.get("category") or "",
        description="" if row.get("description") is None else str(row["description"]),
        latitude=row.get("latitude"),
        longitude=row.get("longitude"),
        status=row.get("status") or DEFAULT_STATUS.value,
        urgency=row.get("urgency") or DEFAULT_URGENCY.value,
        has_before=bool(row.get("has_before")),
        has_after=bool(row.get("has_after")),
    )


def list_issues(store: IssueStore, filters: Optional[Mapping[str, Any]] = None) -> list[IssueSummary]:
    query = build_filter_query(filters)
    return [summarize(row) for row in store.select(query.sql, query.params)]
