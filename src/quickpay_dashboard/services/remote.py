"""
Abstract base class defining the remote table access contract.

The dashboard never talks to a database directly; it goes through a
RemoteTables implementation offering generic select/insert/update/delete
over named tables. Rows are untyped dicts keyed by column name.

Every method is a coroutine. Failures of any kind (not found, conflict,
referential violation, transport) are raised as RemoteError.

Implementations:
- DemoTables: in-memory tables seeded from the fixture dataset
- SparkTables: Unity Catalog Delta tables through Databricks Connect
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

Row = dict[str, Any]


class RemoteTables(ABC):
    """
    Abstract base class for remote table access.

    Subclasses implement the four row operations. ``eq`` is an equality
    predicate (column -> value, all must match); ``order_by`` names a
    column to sort by, descending unless ``descending`` is False.
    """

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        eq: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = True,
    ) -> list[Row]:
        """Return the rows of ``table`` matching ``eq``, optionally ordered."""

    @abstractmethod
    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        """
        Insert rows and return them as stored.

        Implementations assign ``id`` and ``created_at``/``updated_at`` when
        the caller leaves them out.
        """

    @abstractmethod
    async def update(
        self, table: str, patch: Mapping[str, Any], *, eq: Mapping[str, Any]
    ) -> None:
        """Apply ``patch`` to every row matching ``eq``."""

    @abstractmethod
    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> None:
        """Delete every row matching ``eq``. Matching nothing is not an error."""

    @property
    def name(self) -> str:
        return type(self).__name__
