"""Database Engine - unified entry point for the memory engine.

This module provides the DatabaseEngine class that wires the domain
services together over one Database: the query pipeline, the constrained
mutation executor and the snapshot transaction manager. Every public
operation is traced, timed and counted.

Usage:
    from memory_engine.application import DatabaseEngine

    engine = DatabaseEngine(database)

    rows = engine.query([JoinDescriptor("Car")], where("Color", "=", "Red"))
    ids = engine.insert("Car", ["Make", "Model"], [["Audi", "A4"]])

    txn = engine.begin_transaction()
    engine.delete("Car", where("Year", "<", 2000))
    engine.rollback(txn)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Generator, Mapping, Sequence

from memory_engine.application.executor import QueryExecutor
from memory_engine.domain.entities import (
    ColumnDefinition,
    Database,
    ExplicitUpdate,
    ImplicitUpdate,
    JoinDescriptor,
    OrderBy,
    Predicate,
    QueryPlan,
    Record,
    SelectColumn,
    TableData,
)
from memory_engine.domain.errors import (
    NotNullViolationError,
    TransactionError,
    UniqueConstraintViolationError,
)
from memory_engine.domain.services import (
    JoinEngine,
    MutationExecutor,
    PredicateEvaluator,
    SnapshotTransactionManager,
)
from memory_engine.infrastructure.config import EngineConfig
from memory_engine.infrastructure.logging import get_logger, operation_context
from memory_engine.infrastructure.metrics import MetricsRegistry, get_metrics
from memory_engine.infrastructure.tracing import span_attributes, trace_span
from memory_engine.ports.inbound.transaction_manager import Transaction, TransactionManager
from memory_engine.ports.outbound.seed_source import SeedSource

logger = get_logger(__name__)


class DatabaseEngine:
    """Main engine that orchestrates the domain services.

    The engine owns exactly one Database. It holds at most one active
    transaction; while that transaction is open every operation reads and
    writes its snapshot instead of the live store.

    Thread Safety:
        None. Callers sharing an engine across threads or tasks must
        serialize access themselves (see AsyncDatabaseEngine).
    """

    def __init__(
        self,
        database: Database,
        config: EngineConfig | None = None,
        metrics: MetricsRegistry | None = None,
        txn_manager: TransactionManager | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            database: Schema and live data. Mutated in place.
            config: Engine behaviour. Defaults to EngineConfig().
            metrics: Metrics registry. Defaults to the process-wide one.
            txn_manager: Transaction manager. Defaults to snapshot transactions.
        """
        self._database = database
        self._config = config or EngineConfig()
        self._metrics = metrics or get_metrics()

        evaluator = PredicateEvaluator(strict=self._config.strict_predicates)
        self._executor = QueryExecutor(evaluator, JoinEngine())
        self._mutations = MutationExecutor(database.schema, evaluator)
        self._txn_manager = txn_manager or SnapshotTransactionManager()

        self._active_txn: Transaction | None = None

    @classmethod
    def from_seed(
        cls,
        source: SeedSource,
        config: EngineConfig | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> DatabaseEngine:
        """Create an engine over the Database a seed source loads."""
        database = source.load()
        logger.info(
            "engine_seeded",
            tables=len(database.data),
            rows=sum(len(rows) for rows in database.data.values()),
        )
        return cls(database, config=config, metrics=metrics)

    @property
    def database(self) -> Database:
        return self._database

    @property
    def active_transaction(self) -> Transaction | None:
        """The open transaction, if any."""
        return self._active_txn

    # =========================================================================
    # Queries
    # =========================================================================

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
        """Run a query.

        Args:
            tables: Base table descriptor followed by join descriptors.
            predicate: Filter over the joined rows.
            group_by: Aliases to group by.
            order_by: Sort entries, applied left to right.
            offset: Rows to skip.
            limit: Maximum rows to return.
            select: Output columns, or the single row-count sentinel.

        Returns:
            Result rows. The store is never modified.
        """
        plan = QueryPlan(
            tables=tuple(tables),
            predicate=tuple(predicate or ()),
            group_by=tuple(group_by or ()),
            order_by=tuple(order_by or ()),
            offset=offset,
            limit=limit,
            select=tuple(select),
        )
        return self.execute_plan(plan)

    def execute_plan(self, plan: QueryPlan) -> list[Record]:
        """Run a pre-built query plan."""
        with self._instrument(
            "query",
            table=plan.base.real_name,
            joins=len(plan.joins),
            group_by=plan.group_by or None,
            limit=plan.limit,
        ):
            rows = self._executor.execute(self._store, plan)

        self._metrics.rows_returned.observe(len(rows))
        logger.debug("query_executed", table=plan.base.real_name, rows=len(rows))
        return rows

    # =========================================================================
    # Mutations
    # =========================================================================

    def insert(
        self, table: str, columns: Sequence[str], values: Sequence[Sequence[Any]]
    ) -> list[int]:
        """Insert rows, returning the identity values assigned to them."""
        with self._instrument("insert", table=table, rows=len(values)):
            ids = self._mutations.insert(self._store, table, columns, values)

        self._record_affected("insert", table, len(ids))
        return ids

    def update(
        self,
        table: str,
        columns: Sequence[str],
        predicate: Predicate | None,
        explicit: ExplicitUpdate | None = None,
        implicit: ImplicitUpdate | None = None,
    ) -> int:
        """Update matching rows, returning the number of row changes."""
        with self._instrument("update", table=table):
            affected = self._mutations.update(
                self._store, table, columns, predicate, explicit=explicit, implicit=implicit
            )

        self._record_affected("update", table, affected)
        return affected

    def delete(self, table: str, predicate: Predicate | None) -> int:
        """Delete matching rows, returning the number removed."""
        with self._instrument("delete", table=table):
            removed = self._mutations.delete(self._store, table, predicate)

        self._record_affected("delete", table, removed)
        return removed

    def truncate(self, table: str) -> int:
        """Remove every row of a table, returning the previous row count."""
        with self._instrument("truncate", table=table):
            removed = self._mutations.truncate(self._store, table)

        self._record_affected("truncate", table, removed)
        return removed

    def describe(self, table: str) -> Mapping[str, ColumnDefinition]:
        """Return a table's column metadata (read-only)."""
        with self._instrument("describe", table=table):
            return self._mutations.describe(table)

    # =========================================================================
    # Transactions
    # =========================================================================

    def begin_transaction(self) -> Transaction:
        """Start a transaction over a snapshot of the live data.

        Raises:
            TransactionError: If a transaction is already active.
        """
        with self._instrument("begin"):
            if self._active_txn is not None:
                raise TransactionError(
                    f"Transaction {self._active_txn.txn_id} is already active"
                )
            self._active_txn = self._txn_manager.begin(self._database)

        self._metrics.transactions_active.inc()
        logger.debug("transaction_started", txn_id=self._active_txn.txn_id)
        return self._active_txn

    def commit(self, txn: Transaction) -> None:
        """Merge the transaction's snapshot into the live store.

        Raises:
            TransactionError: If txn is not the engine's active transaction.
        """
        with self._instrument("commit", txn_id=txn.txn_id):
            self._ensure_current(txn)
            self._txn_manager.commit(self._database, txn)
            self._active_txn = None

        self._metrics.transactions_total.labels(status="commit").inc()
        self._metrics.transactions_active.dec()
        logger.debug("transaction_committed", txn_id=txn.txn_id)

    def rollback(self, txn: Transaction) -> None:
        """Discard the transaction's snapshot.

        Raises:
            TransactionError: If txn is not the engine's active transaction.
        """
        with self._instrument("rollback", txn_id=txn.txn_id):
            self._ensure_current(txn)
            self._txn_manager.rollback(txn)
            self._active_txn = None

        self._metrics.transactions_total.labels(status="rollback").inc()
        self._metrics.transactions_active.dec()
        logger.debug("transaction_rolled_back", txn_id=txn.txn_id)

    # =========================================================================
    # Stats
    # =========================================================================

    def get_stats(self) -> dict:
        """Get engine statistics.

        Row counts are taken from the live store, so they do not include
        uncommitted changes.
        """
        txn_stats = self._txn_manager.get_stats()
        return {
            "tables": {table: len(rows) for table, rows in self._database.data.items()},
            "strict_predicates": self._config.strict_predicates,
            "in_transaction": self._active_txn is not None,
            "transactions": {
                "active": txn_stats.active_count,
                "committed": txn_stats.committed_total,
                "rolled_back": txn_stats.rolled_back_total,
                "avg_duration_ms": round(txn_stats.avg_duration_ms, 3),
            },
        }

    # =========================================================================
    # Internals
    # =========================================================================

    @property
    def _store(self) -> TableData:
        """The store operations act on: the open snapshot or the live data."""
        if self._active_txn is not None:
            return self._active_txn.snapshot
        return self._database.data

    def _ensure_current(self, txn: Transaction) -> None:
        if self._active_txn is None or txn is not self._active_txn:
            raise TransactionError(f"Transaction {txn.txn_id} is not the active transaction")

    def _record_affected(self, operation: str, table: str, count: int) -> None:
        self._metrics.rows_affected_total.labels(operation=operation).inc(count)
        logger.debug("rows_affected", operation=operation, table=table, rows=count)

    @contextmanager
    def _instrument(self, operation: str, **attributes: Any) -> Generator[None, None, None]:
        """Trace, time and count one engine operation.

        Failures are logged and counted, then re-raised unchanged.
        """
        start = time.perf_counter()
        span_attrs = span_attributes("engine", {"operation": operation, **attributes})

        with operation_context(operation, **attributes), trace_span(
            f"engine.{operation}", span_attrs
        ):
            try:
                yield
            except Exception as e:
                self._metrics.operations_total.labels(operation=operation, status="error").inc()
                if isinstance(e, UniqueConstraintViolationError):
                    self._metrics.constraint_violations_total.labels(kind="unique").inc()
                elif isinstance(e, NotNullViolationError):
                    self._metrics.constraint_violations_total.labels(kind="not_null").inc()
                logger.warning("operation_failed", error_type=type(e).__name__, error=str(e))
                raise
            else:
                self._metrics.operations_total.labels(operation=operation, status="success").inc()
            finally:
                self._metrics.operation_latency_seconds.labels(operation=operation).observe(
                    time.perf_counter() - start
                )
