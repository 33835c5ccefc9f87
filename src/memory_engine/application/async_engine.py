"""Async facade over DatabaseEngine.

The engine itself is synchronous and never yields to the event loop, so
this facade only has to serialize access. It does so with one asyncio.Lock:

    - transaction() / begin_transaction() hold the lock from begin until
      commit or rollback, making the transaction the single writer
    - every other operation takes the lock for its own duration, unless the
      calling context owns the open transaction

Ownership is tracked with a ContextVar, so the task that began a
transaction (and tasks it spawns) operate on its snapshot while every
other task waits for the transaction to end.

Usage:
    engine = AsyncDatabaseEngine(DatabaseEngine(database))

    async with engine.transaction():
        await engine.insert("Car", ["Make"], [["Audi"]])
        await engine.delete("Car", where("Year", "<", 2000))
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, AsyncIterator, Mapping, Sequence

from memory_engine.application.database_engine import DatabaseEngine
from memory_engine.domain.entities import (
    ColumnDefinition,
    ExplicitUpdate,
    ImplicitUpdate,
    JoinDescriptor,
    OrderBy,
    Predicate,
    QueryPlan,
    Record,
    SelectColumn,
)
from memory_engine.domain.errors import TransactionError
from memory_engine.ports.inbound.transaction_manager import Transaction

_owned_transaction: ContextVar[Transaction | None] = ContextVar(
    "memory_engine_owned_transaction", default=None
)


class AsyncDatabaseEngine:
    """Awaitable interface to a DatabaseEngine with a single-writer lock."""

    def __init__(self, engine: DatabaseEngine) -> None:
        self._engine = engine
        self._lock = asyncio.Lock()

    @property
    def engine(self) -> DatabaseEngine:
        return self._engine

    async def query(
        self,
        tables: Sequence[JoinDescriptor],
        predicate: Predicate | None = None,
        group_by: Sequence[str] | None = None,
        order_by: Sequence[OrderBy] | None = None,
        offset: int | None = None,
        limit: int | None = None,
        select: Sequence[SelectColumn] = (),
    ) -> list[Record]:
        async with self._serialized():
            return self._engine.query(
                tables,
                predicate,
                group_by=group_by,
                order_by=order_by,
                offset=offset,
                limit=limit,
                select=select,
            )

    async def execute_plan(self, plan: QueryPlan) -> list[Record]:
        async with self._serialized():
            return self._engine.execute_plan(plan)

    async def insert(
        self, table: str, columns: Sequence[str], values: Sequence[Sequence[Any]]
    ) -> list[int]:
        async with self._serialized():
            return self._engine.insert(table, columns, values)

    async def update(
        self,
        table: str,
        columns: Sequence[str],
        predicate: Predicate | None,
        explicit: ExplicitUpdate | None = None,
        implicit: ImplicitUpdate | None = None,
    ) -> int:
        async with self._serialized():
            return self._engine.update(
                table, columns, predicate, explicit=explicit, implicit=implicit
            )

    async def delete(self, table: str, predicate: Predicate | None) -> int:
        async with self._serialized():
            return self._engine.delete(table, predicate)

    async def truncate(self, table: str) -> int:
        async with self._serialized():
            return self._engine.truncate(table)

    async def describe(self, table: str) -> Mapping[str, ColumnDefinition]:
        return self._engine.describe(table)

    async def get_stats(self) -> dict:
        return self._engine.get_stats()

    async def begin_transaction(self) -> Transaction:
        """Wait for the writer lock, then start a transaction.

        The lock stays held until commit() or rollback() is awaited.

        Raises:
            TransactionError: If the calling context already owns a transaction.
        """
        if self._owns(self._engine.active_transaction):
            raise TransactionError("This context already owns the active transaction")

        await self._lock.acquire()
        try:
            txn = self._engine.begin_transaction()
        except BaseException:
            self._lock.release()
            raise

        _owned_transaction.set(txn)
        return txn

    async def commit(self, txn: Transaction) -> None:
        """Commit the transaction this context owns and release the lock."""
        self._ensure_owner(txn)
        try:
            self._engine.commit(txn)
        finally:
            self._release()

    async def rollback(self, txn: Transaction) -> None:
        """Roll back the transaction this context owns and release the lock."""
        self._ensure_owner(txn)
        try:
            self._engine.rollback(txn)
        finally:
            self._release()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """Run a block in a transaction.

        Commits on normal exit and rolls back if the block raises. A block
        that ends the transaction itself is left alone.
        """
        txn = await self.begin_transaction()
        try:
            yield txn
        except BaseException:
            if txn.is_active():
                await self.rollback(txn)
            raise
        else:
            if txn.is_active():
                await self.commit(txn)

    @staticmethod
    def _owns(txn: Transaction | None) -> bool:
        return txn is not None and _owned_transaction.get() is txn

    def _ensure_owner(self, txn: Transaction) -> None:
        if not self._owns(txn) or txn is not self._engine.active_transaction:
            raise TransactionError(
                f"Transaction {txn.txn_id} is not owned by the calling context"
            )

    def _release(self) -> None:
        _owned_transaction.set(None)
        self._lock.release()

    @asynccontextmanager
    async def _serialized(self) -> AsyncIterator[None]:
        if self._owns(self._engine.active_transaction):
            yield
            return
        async with self._lock:
            yield
