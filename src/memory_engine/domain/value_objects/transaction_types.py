"""Transaction-related types and enumerations."""

from __future__ import annotations

from enum import Enum, auto
from typing import NewType

TransactionId = NewType("TransactionId", int)
"""Unique identifier for a transaction. Monotonically increasing."""


class TransactionState(Enum):
    """Transaction lifecycle states.

    State machine:

        begin() ──> ACTIVE
                      │
              ┌───────┴────────┐
              │                │
          commit()        rollback()
              │                │
              v                v
          COMMITTED       ROLLED_BACK

    While a transaction is ACTIVE every engine operation reads and writes
    its snapshot. Both end states return the engine to operating on the
    live store.
    """

    ACTIVE = auto()
    """Transaction owns a snapshot and receives all operations."""

    COMMITTED = auto()
    """Snapshot has been merged into the live store."""

    ROLLED_BACK = auto()
    """Snapshot has been discarded."""

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in (TransactionState.COMMITTED, TransactionState.ROLLED_BACK)

    def is_active(self) -> bool:
        """Check if the transaction can still perform operations."""
        return self == TransactionState.ACTIVE
