"""
Demo implementation of RemoteTables using in-memory rows.

This backend is useful for:
- Local development without Databricks access
- Testing the stores against realistic data
- Demonstrating the dashboard without cloud dependencies

Ids and timestamps are synthesized locally on insert.
"""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from quickpay_dashboard.data.fixtures import FixtureSet
from quickpay_dashboard.errors import RemoteError
from quickpay_dashboard.lib import logs
from quickpay_dashboard.services.remote import RemoteTables, Row

LOG = logs.logger(__file__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _matches(row: Mapping[str, Any], eq: Mapping[str, Any] | None) -> bool:
    if not eq:
        return True
    return all(row.get(column) == value for column, value in eq.items())


class DemoTables(RemoteTables):
    """
    In-memory tables backed by copies of the fixture rows.

    Args:
        fixtures: Seed dataset, or None for the bundled fixtures.
        empty: Start with empty tables instead of seeding.
    """

    def __init__(self, fixtures: FixtureSet | None = None, empty: bool = False) -> None:
        fixtures = fixtures or FixtureSet.default()
        self._tables: dict[str, list[Row]] = {
            name: [] if empty else copy.deepcopy(list(rows))
            for name, rows in fixtures.tables().items()
        }

    def _table(self, table: str) -> list[Row]:
        try:
            return self._tables[table]
        except KeyError as exc:
            raise RemoteError(f"Unknown table: {table}") from exc

    async def select(
        self,
        table: str,
        *,
        eq: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[Row]:
        rows = [copy.deepcopy(row) for row in self._table(table) if _matches(row, eq)]
        if order_by:
            rows.sort(key=lambda row: str(row.get(order_by) or ""), reverse=descending)
        LOG.debug("select %s eq=%s -> %d rows", table, eq, len(rows))
        return rows

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        target = self._table(table)
        stored: list[Row] = []
        for row in rows:
            record = dict(row)
            record.setdefault("id", str(uuid.uuid4()))
            if any(r.get("id") == record["id"] for r in target):
                raise RemoteError("This record already exists", code="23505")
            timestamp = _now()
            record.setdefault("created_at", timestamp)
            record.setdefault("updated_at", timestamp)
            stored.append(record)
        target.extend(stored)
        LOG.info("insert %s -> %d rows", table, len(stored))
        return [copy.deepcopy(row) for row in stored]

    async def update(
        self, table: str, patch: Mapping[str, Any], *, eq: Mapping[str, Any]
    ) -> None:
        count = 0
        for row in self._table(table):
            if _matches(row, eq):
                row.update(patch)
                row["updated_at"] = _now()
                count += 1
        LOG.info("update %s eq=%s -> %d rows", table, eq, count)

    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> None:
        rows = self._table(table)
        kept = [row for row in rows if not _matches(row, eq)]
        LOG.info("delete %s eq=%s -> %d rows", table, eq, len(rows) - len(kept))
        rows[:] = kept
