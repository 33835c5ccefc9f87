"""Join expansion across dependent tables.

Joins are applied in declaration order. For each accumulated row the target
table is scanned for rows whose reference key equals the row's referer key:

    - one or more matches: the row is replaced by one merged row per match
    - no match: the row is kept as it is

The second rule makes expansion outer-join-preserving, so the row count
never decreases from one join step to the next.

Matched columns are renamed to the select alias scoped to the join's alias.
Columns of the joined table that are not selected keep a default
``<alias>.<column>`` name so later joins and predicates can still refer to
them.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from memory_engine.domain.entities.database import Record, TableData, table_rows
from memory_engine.domain.entities.query import JoinDescriptor, SelectColumn
from memory_engine.domain.value_objects import scoped_name, strict_equals

logger = logging.getLogger(__name__)


class JoinEngine:
    """Expands base rows across join descriptors."""

    def expand(
        self,
        base_rows: Sequence[Mapping[str, Any]],
        joins: Sequence[JoinDescriptor],
        data: TableData,
        select: Sequence[SelectColumn] = (),
    ) -> list[Record]:
        """Expand base rows across every join descriptor.

        Args:
            base_rows: Rows of the base table. They are copied, never modified.
            joins: Join descriptors, applied in order.
            data: Store holding the joined tables (live or snapshot).
            select: Select list used to name joined columns.

        Returns:
            The flattened result rows.

        Raises:
            TableNotFoundError: If a join names an unknown table.
        """
        rows: list[Record] = [dict(row) for row in base_rows]
        for join in joins:
            rows = self._expand_one(rows, join, table_rows(data, join.real_name), select)
        return rows

    def _expand_one(
        self,
        rows: list[Record],
        join: JoinDescriptor,
        target: Sequence[Mapping[str, Any]],
        select: Sequence[SelectColumn],
    ) -> list[Record]:
        if not join.is_join:
            raise ValueError(f"Join on '{join.real_name}' is missing its keys")

        renames = self._column_names(join, select)
        expanded: list[Record] = []
        for row in rows:
            key = row.get(join.referer_key)
            matches = [
                candidate for candidate in target
                if strict_equals(candidate.get(join.reference_key), key)
            ]
            if not matches:
                expanded.append(row)
                continue
            for match in matches:
                merged = dict(row)
                for column, value in match.items():
                    for name in renames.get(column) or (scoped_name(join.alias, column),):
                        merged[name] = value
                expanded.append(merged)

        logger.debug(
            "Joined %s as %s: %d -> %d rows", join.real_name, join.alias, len(rows), len(expanded)
        )
        return expanded

    @staticmethod
    def _column_names(
        join: JoinDescriptor, select: Sequence[SelectColumn]
    ) -> dict[str, tuple[str, ...]]:
        """Map each selected column of the joined table to its output aliases."""
        names: dict[str, list[str]] = {}
        for column in select:
            if column.table == join.alias and column.aggregate is None:
                names.setdefault(column.column, []).append(column.alias)
        return {column: tuple(aliases) for column, aliases in names.items()}
