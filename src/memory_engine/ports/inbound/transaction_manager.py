"""Transaction Manager port for snapshot transactions.

This inbound port defines the contract for transaction management:
begin takes a full copy of the data store, commit merges it back and
rollback throws it away.

There is no conflict detection between a transaction and direct mutation
of the live store. Callers must keep at most one writer active per
Database at a time.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Protocol

from memory_engine.domain.entities.database import Database, TableData
from memory_engine.domain.value_objects import TransactionId, TransactionState


@dataclass(eq=False)
class Transaction:
    """A snapshot transaction handle.

    The snapshot is owned by the transaction until it is committed or
    rolled back.
    """

    txn_id: TransactionId
    snapshot: TableData
    state: TransactionState = TransactionState.ACTIVE
    started_at: float = 0.0

    def is_active(self) -> bool:
        """Return True if transaction can still perform operations."""
        return self.state == TransactionState.ACTIVE

    def is_terminal(self) -> bool:
        """Return True if transaction has ended."""
        return self.state.is_terminal()


@dataclass
class TransactionStats:
    """Statistics for transaction monitoring."""

    active_count: int
    committed_total: int
    rolled_back_total: int
    avg_duration_ms: float


class TransactionManager(Protocol):
    """Protocol for snapshot transaction management."""

    @abstractmethod
    def begin(self, database: Database) -> Transaction:
        """Begin a new transaction.

        Args:
            database: The database whose data is copied.

        Returns:
            A new active Transaction owning an independent snapshot.
        """
        ...

    @abstractmethod
    def commit(self, database: Database, txn: Transaction) -> None:
        """Merge a transaction's snapshot into the live store.

        Raises:
            TransactionError: If the transaction is not active.
        """
        ...

    @abstractmethod
    def rollback(self, txn: Transaction) -> None:
        """Discard a transaction's snapshot.

        Raises:
            TransactionError: If the transaction is not active.
        """
        ...

    @abstractmethod
    def get_stats(self) -> TransactionStats:
        """Return transaction statistics for monitoring."""
        ...
