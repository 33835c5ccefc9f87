"""Snapshot transaction manager.

begin() takes a full deep copy of the data store. Operations routed to the
transaction read and write only that copy, so the live store is untouched
until commit. Schema metadata is immutable and is never copied.

Commit merges at table level: every table present in the snapshot replaces
the live table of the same name, and live tables missing from the snapshot
pass through unchanged. Rollback simply drops the snapshot.

There is no conflict detection. Correctness under concurrent use depends on
the caller serializing all writers through one transaction at a time.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from typing import Dict

from memory_engine.domain.entities.database import Database
from memory_engine.domain.errors import TransactionError
from memory_engine.domain.value_objects import TransactionId, TransactionState
from memory_engine.ports.inbound.transaction_manager import (
    Transaction,
    TransactionStats,
)

logger = logging.getLogger(__name__)


class SnapshotTransactionManager:
    """Deep-copy snapshot transactions over a Database.

    Usage:
        txn_mgr = SnapshotTransactionManager()
        txn = txn_mgr.begin(database)
        executor.insert(txn.snapshot, "Car", columns, values)
        txn_mgr.commit(database, txn)

    Thread Safety:
        Bookkeeping is guarded by a lock; the snapshots themselves are owned
        by their transactions.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_txn_id = 1
        self._active_txns: Dict[TransactionId, Transaction] = {}

        # Statistics
        self._committed_total = 0
        self._rolled_back_total = 0
        self._total_duration_ms = 0.0

    def begin(self, database: Database) -> Transaction:
        """Begin a new transaction with an independent copy of the data."""
        snapshot = copy.deepcopy(database.data)

        with self._lock:
            txn_id = TransactionId(self._next_txn_id)
            self._next_txn_id += 1
            txn = Transaction(
                txn_id=txn_id,
                snapshot=snapshot,
                state=TransactionState.ACTIVE,
                started_at=time.time(),
            )
            self._active_txns[txn_id] = txn

        logger.debug("Transaction %s started over %d tables", txn_id, len(snapshot))
        return txn

    def commit(self, database: Database, txn: Transaction) -> None:
        """Merge the snapshot into the live store.

        Raises:
            TransactionError: If the transaction is not active.
        """
        self._ensure_active(txn)

        for table, rows in txn.snapshot.items():
            database.data[table] = rows

        self._finish(txn, TransactionState.COMMITTED)

    def rollback(self, txn: Transaction) -> None:
        """Discard the snapshot.

        Raises:
            TransactionError: If the transaction is not active.
        """
        self._ensure_active(txn)
        self._finish(txn, TransactionState.ROLLED_BACK)

    def is_active(self, txn: Transaction) -> bool:
        with self._lock:
            return txn.txn_id in self._active_txns

    def get_stats(self) -> TransactionStats:
        """Return transaction statistics."""
        with self._lock:
            finished = self._committed_total + self._rolled_back_total
            return TransactionStats(
                active_count=len(self._active_txns),
                committed_total=self._committed_total,
                rolled_back_total=self._rolled_back_total,
                avg_duration_ms=self._total_duration_ms / finished if finished else 0.0,
            )

    def _ensure_active(self, txn: Transaction) -> None:
        if not txn.is_active():
            raise TransactionError(f"Transaction {txn.txn_id} is not active")

    def _finish(self, txn: Transaction, state: TransactionState) -> None:
        txn.state = state
        txn.snapshot = {}

        with self._lock:
            self._active_txns.pop(txn.txn_id, None)
            if state == TransactionState.COMMITTED:
                self._committed_total += 1
            else:
                self._rolled_back_total += 1
            self._total_duration_ms += (time.time() - txn.started_at) * 1000

        logger.debug("Transaction %s %s", txn.txn_id, state.name.lower())
