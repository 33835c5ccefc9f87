"""Query Engine port - the boundary offered to the ORM layer.

The ORM layer builds predicate trees, join descriptors and select lists and
hands them to an engine implementing this protocol. While a transaction is
active, every operation acts on that transaction's snapshot instead of the
live store.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from memory_engine.domain.entities import (
    ColumnDefinition,
    JoinDescriptor,
    OrderBy,
    Predicate,
    QueryPlan,
    Record,
    SelectColumn,
)
from memory_engine.domain.entities.mutation import ExplicitUpdate, ImplicitUpdate
from memory_engine.ports.inbound.transaction_manager import Transaction


@runtime_checkable
class QueryEngine(Protocol):
    """Protocol for the engine's query, mutation and transaction operations."""

    @abstractmethod
    def query(
        self,
        tables: Sequence[JoinDescriptor],
        predicate: Predicate | None = None,
        group_by: Sequence[str] | None = None,
        order_by: Sequence[OrderBy] | None = None,
        offset: int | None = None,
        limit: int | None = None,
        select: Sequence[SelectColumn] = (),
    ) -> list[Record]:
        """Run the join, filter, group, sort, paginate and project pipeline.

        The first descriptor in ``tables`` names the base table.
        """
        ...

    @abstractmethod
    def execute_plan(self, plan: QueryPlan) -> list[Record]:
        """Run a pre-built query plan, such as one decoded from JSON."""
        ...

    @abstractmethod
    def insert(
        self, table: str, columns: Sequence[str], values: Sequence[Sequence[Any]]
    ) -> list[int]:
        """Insert rows, returning the assigned identity values."""
        ...

    @abstractmethod
    def update(
        self,
        table: str,
        columns: Sequence[str],
        predicate: Predicate | None,
        explicit: ExplicitUpdate | None = None,
        implicit: ImplicitUpdate | None = None,
    ) -> int:
        """Update matching rows, returning the number of changes."""
        ...

    @abstractmethod
    def delete(self, table: str, predicate: Predicate | None) -> int:
        """Delete matching rows, returning the number removed."""
        ...

    @abstractmethod
    def truncate(self, table: str) -> int:
        """Remove all rows, returning the previous row count."""
        ...

    @abstractmethod
    def describe(self, table: str) -> Mapping[str, ColumnDefinition]:
        """Return the table's column metadata (read-only)."""
        ...

    @abstractmethod
    def begin_transaction(self) -> Transaction:
        """Start a transaction; later operations act on its snapshot."""
        ...

    @abstractmethod
    def commit(self, txn: Transaction) -> None:
        """Merge the transaction's snapshot into the live store."""
        ...

    @abstractmethod
    def rollback(self, txn: Transaction) -> None:
        """Discard the transaction's snapshot."""
        ...

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """Return table sizes and transaction statistics."""
        ...
