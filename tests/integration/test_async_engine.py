"""Integration tests for AsyncDatabaseEngine."""

from __future__ import annotations

import asyncio

import pytest

from memory_engine.application import AsyncDatabaseEngine, DatabaseEngine
from memory_engine.domain.entities import JoinDescriptor, SelectColumn, where
from memory_engine.domain.errors import TransactionError

CAR = [JoinDescriptor("Car")]
COUNT = [SelectColumn.row_count()]


@pytest.mark.integration
class TestAsyncDatabaseEngine:
    """Tests for the async facade and its writer lock."""

    @pytest.fixture
    def async_engine(self, engine: DatabaseEngine) -> AsyncDatabaseEngine:
        return AsyncDatabaseEngine(engine)

    def test_query_and_mutations(self, async_engine: AsyncDatabaseEngine) -> None:
        async def scenario() -> tuple[list[int], int, int]:
            ids = await async_engine.insert("Car", ["Make"], [["Audi"]])
            removed = await async_engine.delete("Car", [where("Color", "=", "Red")])
            rows = await async_engine.query(CAR, select=COUNT)
            return ids, removed, rows[0]["$$count"]

        assert asyncio.run(scenario()) == ([16], 3, 13)

    def test_transaction_commits_on_exit(
        self, async_engine: AsyncDatabaseEngine, engine: DatabaseEngine
    ) -> None:
        async def scenario() -> None:
            async with async_engine.transaction():
                await async_engine.delete("Car", [where("Color", "=", "Red")])

        asyncio.run(scenario())

        assert engine.database.row_count("Car") == 12
        assert engine.active_transaction is None

    def test_transaction_rolls_back_on_error(
        self, async_engine: AsyncDatabaseEngine, engine: DatabaseEngine
    ) -> None:
        async def scenario() -> None:
            async with async_engine.transaction():
                await async_engine.truncate("Car")
                raise RuntimeError("abort")

        with pytest.raises(RuntimeError):
            asyncio.run(scenario())

        assert engine.database.row_count("Car") == 15
        assert engine.active_transaction is None

    def test_other_tasks_wait_for_the_transaction(
        self, async_engine: AsyncDatabaseEngine
    ) -> None:
        """A concurrent query only runs after the transaction commits."""

        async def scenario() -> int:
            started = asyncio.Event()
            release = asyncio.Event()

            async def writer() -> None:
                async with async_engine.transaction():
                    await async_engine.delete("Car", [where("Color", "=", "Red")])
                    started.set()
                    await release.wait()

            async def reader() -> int:
                await started.wait()
                rows = await async_engine.query(CAR, select=COUNT)
                return rows[0]["$$count"]

            writer_task = asyncio.create_task(writer())
            reader_task = asyncio.create_task(reader())
            await started.wait()
            await asyncio.sleep(0)
            assert not reader_task.done()

            release.set()
            await writer_task
            return await reader_task

        assert asyncio.run(scenario()) == 12

    def test_nested_begin_rejected(self, async_engine: AsyncDatabaseEngine) -> None:
        async def scenario() -> None:
            async with async_engine.transaction():
                await async_engine.begin_transaction()

        with pytest.raises(TransactionError):
            asyncio.run(scenario())

    def test_foreign_commit_rejected(
        self, async_engine: AsyncDatabaseEngine, engine: DatabaseEngine
    ) -> None:
        """Only the task that began a transaction may end it."""

        async def scenario() -> None:
            began = asyncio.Event()
            done = asyncio.Event()
            handles = []

            async def writer() -> None:
                handles.append(await async_engine.begin_transaction())
                began.set()
                await done.wait()
                await async_engine.rollback(handles[0])

            task = asyncio.create_task(writer())
            await began.wait()
            try:
                with pytest.raises(TransactionError):
                    await async_engine.commit(handles[0])
            finally:
                done.set()
                await task

        asyncio.run(scenario())

        assert engine.active_transaction is None
