# File: meresahar/db/store.py
"""Record store adapter for the ``issues`` table.

Every method checks a connection out of the engine pool for exactly one
logical operation and returns it before leaving, so callers never hold a
connection between operations. Driver and query failures surface as
:class:`StoreUnavailable`.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Mapping

from sqlalchemy import func, insert, select, text, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from meresahar.models.issue import Issue

issues_table = Issue.__table__


class StoreUnavailable(Exception):
    """The database could not be reached or rejected the query."""


class RecordNotFound(Exception):
    def __init__(self, issue_id: int):
        super().__init__(f"Issue {issue_id} not found")
        self.issue_id = issue_id


class IssueStore:
    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def _connect(self, operation: str) -> Iterator[Connection]:
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            logging.error(f"Store failure during {operation}: {e}", exc_info=True)
            raise StoreUnavailable(operation) from e

    def ping(self) -> None:
        with self._connect("ping") as conn:
            conn.scalar(text("SELECT 1"))

    def insert_issue(self, values: Mapping[str, Any]) -> int:
        with self._connect("insert") as conn:
            result = conn.execute(insert(issues_table).values(**values))
            return result.inserted_primary_key[0]

    def select(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict]:
        with self._connect("select") as conn:
            rows = conn.execute(text(sql), dict(params or {})).mappings().all()
            return [dict(r) for r in rows]

    def update_issue(self, issue_id: int, values: Mapping[str, Any], *conditions) -> int:
        """Single-statement UPDATE keyed by id; returns the matched row count."""
        stmt = update(issues_table).where(issues_table.c.id == issue_id)
        for cond in conditions:
            stmt = stmt.where(cond)
        with self._connect("update") as conn:
            return conn.execute(stmt.values(**values)).rowcount

    def exists(self, issue_id: int) -> bool:
        with self._connect("exists") as conn:
            found = conn.scalar(select(issues_table.c.id).where(issues_table.c.id == issue_id))
            return found is not None

    def read_column(self, issue_id: int, column: str) -> Any:
        with self._connect("read") as conn:
            row = conn.execute(
                select(issues_table.c[column]).where(issues_table.c.id == issue_id)
            ).first()
        if row is None:
            raise RecordNotFound(issue_id)
        return row[0]

    def write_column(self, issue_id: int, column: str, value: Any) -> None:
        if self.update_issue(issue_id, {column: value}) == 0:
            raise RecordNotFound(issue_id)

    def count(self) -> int:
        with self._connect("count") as conn:
            return conn.scalar(select(func.count()).select_from(issues_table)) or 0

    def count_by(self, column: str) -> list[tuple[Any, int]]:
        col = issues_table.c[column]
        with self._connect(f"count by {column}") as conn:
            rows = conn.execute(select(col, func.count()).group_by(col)).all()
            return [(value, n) for value, n in rows]

    def created_since(self, since: datetime) -> list[datetime]:
        col = issues_table.c.created_at
        with self._connect("created since") as conn:
            return list(conn.scalars(select(col).where(col >= since)))
