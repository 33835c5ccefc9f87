"""Application layer for the memory engine.

The application layer orchestrates the domain services to fulfil the
engine's use cases and adds tracing, metrics and logging around them.

Exports:
    DatabaseEngine:
        - DatabaseEngine: Main synchronous entry point
        - AsyncDatabaseEngine: Awaitable facade with a single-writer lock
    Executor:
        - QueryExecutor: Runs the join/filter/group/sort/paginate/project pipeline
"""

from memory_engine.application.async_engine import AsyncDatabaseEngine
from memory_engine.application.database_engine import DatabaseEngine
from memory_engine.application.executor import QueryExecutor

__all__ = [
    "DatabaseEngine",
    "AsyncDatabaseEngine",
    "QueryExecutor",
]
