# meresahar/services/filters.py
"""Builds the listing SELECT from optional equality filters.

Filters are a mapping of field name to optional value. Present entries are
folded, in order, into parallel lists of predicates and bound parameters;
raw values only ever travel as parameters.
"""
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

FILTERABLE_FIELDS = ("category", "status", "urgency")

SUMMARY_PROJECTION = (
    "id, username, category, description, latitude, longitude, status, urgency, "
    "(image IS NOT NULL) AS has_before, (after_image IS NOT NULL) AS has_after"
)


@dataclass(frozen=True)
class FilterQuery:
    sql: str
    params: dict = field(default_factory=dict)

    @property
    def bind_values(self) -> list:
        """Parameter values in placeholder order (p1, p2, ...)."""
        return [self.params[f"p{i}"] for i in range(1, len(self.params) + 1)]


def is_present(value: Optional[Any]) -> bool:
    # empty <select> options arrive as ""
    return value is not None and value != ""


def build_filter_query(
    filters: Optional[Mapping[str, Any]] = None,
    projection: str = SUMMARY_PROJECTION,
) -> FilterQuery:
    filters = filters or {}
    predicates: list[str] = []
    params: dict[str, Any] = {}

    for name in FILTERABLE_FIELDS:
        value = filters.get(name)
        if not is_present(value):
            continue
        placeholder = f"p{len(predicates) + 1}"
        predicates.append(f"{name} = :{placeholder}")
        params[placeholder] = value

    sql = f"SELECT {projection} FROM issues"
    if predicates:
        sql += " WHERE " + " AND ".join(predicates)
    sql += " ORDER BY id DESC"
    return FilterQuery(sql=sql, params=params)
