"""Constrained insert, update, delete and truncate.

Every mutation works on a data store passed in by the caller - the live
store or a transaction's snapshot - and follows validate-then-commit: new
table contents are built and checked aside, and only swapped into the store
once every check has passed. A failing call leaves the table untouched.

Constraints enforced on insert:
    - Identity columns receive ``len(table) + 1 + row_index``
    - A supplied non-identity, non-nullable column may not be null
    - The composite key over all primary and unique columns must be
      distinct across existing and new rows
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from memory_engine.domain.entities.database import Record, TableData, table_rows
from memory_engine.domain.entities.mutation import ExplicitUpdate, ImplicitUpdate
from memory_engine.domain.entities.predicate import Predicate
from memory_engine.domain.entities.schema import ColumnDefinition, SchemaRegistry
from memory_engine.domain.errors import (
    NotNullViolationError,
    UniqueConstraintViolationError,
)
from memory_engine.domain.services.predicate_evaluator import PredicateEvaluator
from memory_engine.domain.value_objects import strict_equals, value_key

logger = logging.getLogger(__name__)


class MutationExecutor:
    """Applies mutations to a table store under schema constraints."""

    def __init__(self, schema: SchemaRegistry, evaluator: PredicateEvaluator | None = None) -> None:
        self._schema = schema
        self._evaluator = evaluator or PredicateEvaluator()

    def insert(
        self,
        data: TableData,
        table: str,
        columns: Sequence[str],
        values: Sequence[Sequence[Any]],
    ) -> list[int]:
        """Insert rows into a table.

        Args:
            data: Store to write to.
            table: Target table.
            columns: Column names, in the order values are given.
            values: One value tuple per new row.

        Returns:
            The identity values assigned to the new rows, in input order.

        Raises:
            TableNotFoundError: If the table does not exist.
            ValueError: If a column is unknown or a row has the wrong length.
            NotNullViolationError: If a non-nullable column is given null.
            UniqueConstraintViolationError: If a composite key is duplicated.
        """
        existing = table_rows(data, table)
        definitions = self._schema.columns(table)
        self._check_columns(table, definitions, columns)

        start_id = len(existing) + 1
        new_rows = [
            self._build_record(table, definitions, columns, row, start_id + n)
            for n, row in enumerate(values)
        ]

        candidate = existing + new_rows
        self._check_unique(table, candidate)

        data[table] = candidate
        logger.debug("Inserted %d rows into %s", len(new_rows), table)
        return [start_id + n for n in range(len(new_rows))]

    def update(
        self,
        data: TableData,
        table: str,
        columns: Sequence[str],
        predicate: Predicate | None,
        explicit: ExplicitUpdate | None = None,
        implicit: ImplicitUpdate | None = None,
    ) -> int:
        """Update rows matching a predicate.

        Implicit replacement runs first, then explicit assignment. A row
        changed by both modes counts once per mode.

        Returns:
            Number of row changes made.
        """
        rows = list(table_rows(data, table))
        affected = 0

        if implicit is not None:
            keys = list(implicit.primary_keys) or self._schema.primary_key_columns(table)
            for i, row in enumerate(rows):
                if not self._evaluator.evaluate(row, predicate):
                    continue
                replacement = self._find_replacement(row, keys, implicit.objects)
                if replacement is not None:
                    rows[i] = dict(replacement)
                    affected += 1

        if explicit is not None:
            if len(explicit.values) != len(columns):
                raise ValueError(
                    f"Update on '{table}' has {len(columns)} columns but {len(explicit.values)} values"
                )
            self._check_columns(table, self._schema.columns(table), columns)
            assignments = dict(zip(columns, explicit.values))
            for i, row in enumerate(rows):
                if self._evaluator.evaluate(row, predicate):
                    rows[i] = {**row, **assignments}
                    affected += 1

        data[table] = rows
        logger.debug("Updated %d rows in %s", affected, table)
        return affected

    def delete(self, data: TableData, table: str, predicate: Predicate | None) -> int:
        """Remove every row matching the predicate. Returns the count removed."""
        rows = table_rows(data, table)
        kept = [row for row in rows if not self._evaluator.evaluate(row, predicate)]
        data[table] = kept
        return len(rows) - len(kept)

    def truncate(self, data: TableData, table: str) -> int:
        """Remove all rows. Returns the row count before clearing."""
        count = len(table_rows(data, table))
        data[table] = []
        return count

    def describe(self, table: str) -> Mapping[str, ColumnDefinition]:
        """Read-only column metadata for a table."""
        return self._schema.columns(table)

    @staticmethod
    def _check_columns(
        table: str, definitions: Mapping[str, ColumnDefinition], columns: Sequence[str]
    ) -> None:
        unknown = [c for c in columns if c not in definitions]
        if unknown:
            raise ValueError(f"Unknown columns for '{table}': {', '.join(unknown)}")

    @staticmethod
    def _build_record(
        table: str,
        definitions: Mapping[str, ColumnDefinition],
        columns: Sequence[str],
        values: Sequence[Any],
        identity: int,
    ) -> Record:
        if len(values) != len(columns):
            raise ValueError(
                f"Insert into '{table}' has {len(columns)} columns but a row of {len(values)} values"
            )

        record: Record = {
            name: identity if column.is_identity else column.produce_default()
            for name, column in definitions.items()
        }
        for name, value in zip(columns, values):
            column = definitions[name]
            if column.is_identity:
                continue
            if value is None and not column.is_nullable:
                raise NotNullViolationError(table, name)
            record[name] = value
        return record

    def _check_unique(self, table: str, rows: Sequence[Mapping[str, Any]]) -> None:
        key_columns = self._schema.unique_key_columns(table)
        if not key_columns:
            return
        seen: set[tuple[Any, ...]] = set()
        for row in rows:
            key = tuple(value_key(row.get(c)) for c in key_columns)
            if key in seen:
                raise UniqueConstraintViolationError(
                    table, key_columns, tuple(row.get(c) for c in key_columns)
                )
            seen.add(key)

    @staticmethod
    def _find_replacement(
        row: Mapping[str, Any], keys: Sequence[str], candidates: Sequence[Mapping[str, Any]]
    ) -> Mapping[str, Any] | None:
        for candidate in candidates:
            if all(strict_equals(candidate.get(k), row.get(k)) for k in keys):
                return candidate
        return None
