"""
Shared fixtures and fake collaborators for the QuickPay dashboard tests.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Sequence

import pytest

from quickpay_dashboard.data.fixtures import FixtureSet
from quickpay_dashboard.errors import RemoteError
from quickpay_dashboard.services.auth import DemoAuthProvider
from quickpay_dashboard.services.remote import RemoteTables, Row
from quickpay_dashboard.services.remote_demo import DemoTables


def make_row(invoice_id: str, status: str = "draft", total: float = 100.0, **extra: Any) -> Row:
    """Minimal ``invoices`` row."""
    row: Row = {
        "id": invoice_id,
        "user_id": "1",
        "invoice_number": f"INV-{invoice_id.upper()}",
        "status": status,
        "issue_date": "2024-10-01",
        "due_date": "2024-10-31",
        "subtotal": total,
        "tax_rate": 0,
        "tax_amount": 0,
        "total": total,
        "created_at": "2024-10-01T09:00:00+00:00",
    }
    row.update(extra)
    return row


class FailingTables(RemoteTables):
    """Every call fails the way an unreachable backend would."""

    def __init__(self, message: str = "connection refused", code: str | None = None) -> None:
        self.message = message
        self.code = code
        self.calls: list[str] = []

    def _fail(self, op: str) -> None:
        self.calls.append(op)
        raise RemoteError(self.message, code=self.code)

    async def select(self, table: str, *, eq=None, order_by=None, descending=True) -> list[Row]:
        self._fail("select")
        return []

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        self._fail("insert")
        return []

    async def update(self, table: str, patch: Mapping[str, Any], *, eq: Mapping[str, Any]) -> None:
        self._fail("update")

    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> None:
        self._fail("delete")


class RecordingTables(DemoTables):
    """DemoTables that records every call and can fail selected operations."""

    def __init__(self, *args: Any, fail_on: set[tuple[str, str]] | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.calls: list[tuple[str, str]] = []
        self.fail_on = fail_on or set()

    def _record(self, op: str, table: str) -> None:
        self.calls.append((op, table))
        if (op, table) in self.fail_on:
            raise RemoteError("This record already exists", code="23505")

    async def select(self, table: str, **kwargs: Any) -> list[Row]:
        self._record("select", table)
        return await super().select(table, **kwargs)

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        self._record("insert", table)
        return await super().insert(table, rows)

    async def update(self, table: str, patch: Mapping[str, Any], *, eq: Mapping[str, Any]) -> None:
        self._record("update", table)
        await super().update(table, patch, eq=eq)

    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> None:
        self._record("delete", table)
        await super().delete(table, eq=eq)


class ScriptedTables(RemoteTables):
    """
    Select responses are queued up front and released by the test, so
    responses can be made to arrive in any order.
    """

    def __init__(self) -> None:
        self._pending: list[tuple[asyncio.Event, list[Row]]] = []

    def queue(self, rows: list[Row]) -> asyncio.Event:
        gate = asyncio.Event()
        self._pending.append((gate, rows))
        return gate

    async def select(self, table: str, *, eq=None, order_by=None, descending=True) -> list[Row]:
        gate, rows = self._pending.pop(0)
        await gate.wait()
        return rows

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        return [dict(row) for row in rows]

    async def update(self, table: str, patch: Mapping[str, Any], *, eq: Mapping[str, Any]) -> None:
        return None

    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> None:
        return None


@pytest.fixture
def fixture_set() -> FixtureSet:
    return FixtureSet.default()


@pytest.fixture
def demo_tables() -> DemoTables:
    return DemoTables()


@pytest.fixture
def auth() -> DemoAuthProvider:
    return DemoAuthProvider()


@pytest.fixture
def signed_out_auth() -> DemoAuthProvider:
    return DemoAuthProvider(signed_in=False)


@pytest.fixture
def valid_candidate() -> dict[str, Any]:
    """Creation form values that pass validation (total 1400)."""
    return {
        "invoice_number": "INV-TEST-001",
        "status": "draft",
        "issue_date": "2024-11-01",
        "due_date": "2024-12-01",
        "client_id": "client-001",
        "client_name": "Alex Parkinson",
        "client_email": "Alex@Email.com",
        "tax_rate": 0,
        "items": [
            {"description": "Legal Advising", "quantity": 2, "unit_price": 500},
            {"description": "Expert Consulting", "quantity": 1, "unit_price": 400},
        ],
    }
