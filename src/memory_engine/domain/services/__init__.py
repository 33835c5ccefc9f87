"""Domain services for the memory engine.

Exports:
    - PredicateEvaluator: Short-circuiting predicate evaluation
    - JoinEngine: Outer-join-preserving expansion
    - group_rows, partition, aggregate: Grouping and aggregation
    - sort_rows, compare_rows: Multi-key stable sorting
    - paginate, project: Offset/limit and projection
    - MutationExecutor: Constrained insert/update/delete/truncate
    - SnapshotTransactionManager: Snapshot begin/commit/rollback
"""

from memory_engine.domain.services.aggregation import aggregate, group_rows, partition
from memory_engine.domain.services.join_engine import JoinEngine
from memory_engine.domain.services.mutation_executor import MutationExecutor
from memory_engine.domain.services.pagination import paginate, project
from memory_engine.domain.services.predicate_evaluator import PredicateEvaluator, like_pattern
from memory_engine.domain.services.sorter import compare_rows, sort_rows
from memory_engine.domain.services.transaction_manager import SnapshotTransactionManager

__all__ = [
    "PredicateEvaluator",
    "like_pattern",
    "JoinEngine",
    "aggregate",
    "group_rows",
    "partition",
    "compare_rows",
    "sort_rows",
    "paginate",
    "project",
    "MutationExecutor",
    "SnapshotTransactionManager",
]
