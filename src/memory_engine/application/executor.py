"""Query executor - the read pipeline.

A query runs as a fixed sequence of stages over fully materialized rows:

    base table ──> join ──> filter ──> group ──> sort ──> paginate ──> project

Grouping and sorting are skipped when the plan does not ask for them.
There is no planner and no index; every stage is a full pass. The store
handed to execute() may be the live data or a transaction snapshot.
"""

from __future__ import annotations

from memory_engine.domain.entities import QueryPlan, Record, TableData, table_rows
from memory_engine.domain.services import (
    JoinEngine,
    PredicateEvaluator,
    group_rows,
    paginate,
    project,
    sort_rows,
)


class QueryExecutor:
    """Runs query plans against a table store."""

    def __init__(
        self,
        evaluator: PredicateEvaluator | None = None,
        join_engine: JoinEngine | None = None,
    ) -> None:
        self._evaluator = evaluator or PredicateEvaluator()
        self._join_engine = join_engine or JoinEngine()

    @property
    def evaluator(self) -> PredicateEvaluator:
        return self._evaluator

    def execute(self, data: TableData, plan: QueryPlan) -> list[Record]:
        """Execute a query plan.

        Args:
            data: Store to read from (live or snapshot). Never modified.
            plan: The query to run.

        Returns:
            Projected result rows.

        Raises:
            TableNotFoundError: If a table in the plan does not exist.
            UnsupportedComparisonTypeError: If sorting meets values with no
                ordering. No partial result is returned.
        """
        rows = self._join_engine.expand(
            table_rows(data, plan.base.real_name), plan.joins, data, plan.select
        )
        rows = self._evaluator.filter(rows, plan.predicate)

        if plan.group_by:
            rows = group_rows(rows, plan.group_by)

        if plan.order_by:
            rows = sort_rows(rows, plan.order_by)

        rows = paginate(rows, plan.offset, plan.limit)
        return project(rows, plan.select)
