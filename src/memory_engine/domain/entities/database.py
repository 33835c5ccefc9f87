"""The Database aggregate - schema plus table data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from memory_engine.domain.entities.schema import SchemaRegistry
from memory_engine.domain.errors import TableNotFoundError
from memory_engine.domain.value_objects import Value

Record = dict[str, Value]
"""A row: column name to value, in insertion order."""

TableData = dict[str, list[Record]]
"""Table name to its rows, in insertion order."""


@dataclass
class Database:
    """A schema and the rows it describes.

    The Database is created once from external collaborators and is then
    mutated in place by the mutation executor and the transaction manager.
    Every table holding data must be known to the schema; tables in the
    schema without data start out empty.
    """

    schema: SchemaRegistry
    data: TableData = field(default_factory=dict)

    def __post_init__(self) -> None:
        for table in self.data:
            if not self.schema.has_table(table):
                raise TableNotFoundError(table)
        for table in self.schema:
            self.data.setdefault(table, [])

    @classmethod
    def from_mappings(
        cls,
        schema: Mapping[str, Mapping[str, Any]],
        data: Mapping[str, list[Mapping[str, Any]]] | None = None,
    ) -> Database:
        """Build a Database from the ORM's ``$schema`` / ``$data`` shapes."""
        return cls(
            schema=SchemaRegistry.from_mapping(schema),
            data={table: [dict(row) for row in rows] for table, rows in (data or {}).items()},
        )

    def rows(self, table: str) -> list[Record]:
        """Rows of a table in the live store."""
        return table_rows(self.data, table)

    def row_count(self, table: str) -> int:
        return len(self.rows(table))


def table_rows(data: TableData, table: str) -> list[Record]:
    """Look up a table's rows in a data store (live or snapshot).

    Raises:
        TableNotFoundError: If the store has no such table.
    """
    try:
        return data[table]
    except KeyError:
        raise TableNotFoundError(table) from None
