"""
Spark-backed implementation of RemoteTables for Databricks.

Tables live in a Unity Catalog schema (``QUICKPAY_CATALOG_SCHEMA``) as
Delta tables named after the logical tables (``invoices``,
``invoice_items``, ``clients``, ``payments``, ``users``).

- select: DataFrame read with equality filters and ordering
- insert: DataFrame append, ids and timestamps synthesized client-side
- update/delete: parameterized Spark SQL statements

Spark calls block, so each one runs in the event loop's default executor.
Any Spark or transport failure is raised as RemoteError.
"""

import asyncio
import functools
import re
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Mapping, Sequence, TypeVar

from pyspark.sql import functions as F
from pyspark.sql.types import StructType

from quickpay_dashboard.errors import RemoteError
from quickpay_dashboard.lib import clients, logs
from quickpay_dashboard.services.remote import RemoteTables, Row
from quickpay_dashboard.utils import parse_date, parse_datetime

LOG = logs.logger(__file__)

T = TypeVar("T")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SCHEMA_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def _identifier(name: str) -> str:
    """Return a back-quoted identifier, rejecting anything that is not a plain name."""
    if not _IDENTIFIER_RE.match(name):
        raise RemoteError(f"Invalid column name: {name}")
    return f"`{name}`"


def _to_python(value: Any) -> Any:
    """Convert Spark row values into the JSON-friendly shapes rows use."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def _coerce(value: Any, type_name: str) -> Any:
    """Convert a row value into the Python type Spark expects for a column."""
    if value is None:
        return None
    if type_name == "timestamp":
        return parse_datetime(value)
    if type_name == "date":
        return parse_date(value)
    if type_name.startswith("decimal"):
        return Decimal(str(value))
    if type_name in ("double", "float"):
        return float(value)
    if type_name in ("integer", "long", "short"):
        return int(value)
    return value


class SparkTables(RemoteTables):
    """
    Remote tables stored as Delta tables in a Unity Catalog schema.

    Args:
        catalog_schema: ``catalog.schema`` holding the tables.
    """

    def __init__(self, catalog_schema: str) -> None:
        if not _SCHEMA_RE.match(catalog_schema):
            raise ValueError(f"Invalid catalog schema: {catalog_schema}")
        self.catalog_schema = catalog_schema
        self._schemas: dict[str, StructType] = {}

    def _qualified(self, table: str) -> str:
        return f"{self.catalog_schema}.{_identifier(table)}"

    def _schema(self, table: str) -> StructType:
        schema = self._schemas.get(table)
        if schema is None:
            schema = clients.spark().read.table(self._qualified(table)).schema
            self._schemas[table] = schema
        return schema

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, functools.partial(fn, *args))
        except RemoteError:
            raise
        except Exception as exc:
            LOG.warning("Spark call %s failed", fn.__name__, exc_info=True)
            raise RemoteError.from_exception(exc) from exc

    def _predicate(
        self, table: str, eq: Mapping[str, Any], params: dict[str, Any]
    ) -> str:
        if not eq:
            raise RemoteError("Refusing to modify a table without a predicate")
        types = {f.name: f.dataType.simpleString() for f in self._schema(table).fields}
        clauses = []
        for column, value in eq.items():
            key = f"w{len(params)}"
            params[key] = value
            cast = types.get(column, "string")
            clauses.append(f"{_identifier(column)} = CAST(:{key} AS {cast})")
        return " AND ".join(clauses)

    def _select_sync(
        self,
        table: str,
        eq: Mapping[str, Any] | None,
        order_by: str | None,
        descending: bool,
    ) -> list[Row]:
        df = clients.spark().read.table(self._qualified(table))
        for column, value in (eq or {}).items():
            df = df.filter(F.col(column) == F.lit(value))
        if order_by:
            col = F.col(order_by)
            df = df.orderBy(col.desc() if descending else col.asc())
        return [
            {k: _to_python(v) for k, v in row.asDict(recursive=True).items()}
            for row in df.collect()
        ]

    def _insert_sync(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        schema = self._schema(table)
        now = datetime.now(timezone.utc).isoformat()
        stored: list[Row] = []
        for row in rows:
            record = dict(row)
            record.setdefault("id", str(uuid.uuid4()))
            if "created_at" in schema.fieldNames():
                record.setdefault("created_at", now)
            if "updated_at" in schema.fieldNames():
                record.setdefault("updated_at", now)
            stored.append(record)
        data = [
            tuple(
                _coerce(record.get(f.name), f.dataType.typeName()) for f in schema.fields
            )
            for record in stored
        ]
        spark = clients.spark()
        spark.createDataFrame(data, schema=schema).write.mode("append").saveAsTable(
            self._qualified(table)
        )
        return stored

    def _update_sync(
        self, table: str, patch: Mapping[str, Any], eq: Mapping[str, Any]
    ) -> None:
        types = {f.name: f.dataType.simpleString() for f in self._schema(table).fields}
        params: dict[str, Any] = {}
        assignments = []
        for column, value in patch.items():
            if column in ("id", "updated_at"):
                continue
            key = f"s{len(params)}"
            if value is None:
                assignments.append(f"{_identifier(column)} = NULL")
                continue
            params[key] = value
            cast = types.get(column, "string")
            assignments.append(f"{_identifier(column)} = CAST(:{key} AS {cast})")
        if "updated_at" in types:
            assignments.append("`updated_at` = current_timestamp()")
        if not assignments:
            return
        predicate = self._predicate(table, eq, params)
        clients.spark().sql(
            f"UPDATE {self._qualified(table)} SET {', '.join(assignments)} WHERE {predicate}",
            args=params,
        )

    def _delete_sync(self, table: str, eq: Mapping[str, Any]) -> None:
        params: dict[str, Any] = {}
        predicate = self._predicate(table, eq, params)
        clients.spark().sql(
            f"DELETE FROM {self._qualified(table)} WHERE {predicate}", args=params
        )

    async def select(
        self,
        table: str,
        *,
        eq: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[Row]:
        rows = await self._run(self._select_sync, table, eq, order_by, descending)
        LOG.info("select %s eq=%s -> %d rows", table, eq, len(rows))
        return rows

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        stored = await self._run(self._insert_sync, table, rows)
        LOG.info("insert %s -> %d rows", table, len(stored))
        return stored

    async def update(
        self, table: str, patch: Mapping[str, Any], *, eq: Mapping[str, Any]
    ) -> None:
        await self._run(self._update_sync, table, patch, eq)
        LOG.info("update %s eq=%s", table, eq)

    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> None:
        await self._run(self._delete_sync, table, eq)
        LOG.info("delete %s eq=%s", table, eq)
