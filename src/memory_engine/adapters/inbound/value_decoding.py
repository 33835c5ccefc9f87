"""Decoding of JSON request values into engine column types.

JSON has no date type, so date columns arrive over REST as ISO-8601 strings.
The seed loader parses stored dates into ``datetime`` objects; request values
go through the same parsing so that predicates compare dates with dates and
inserted rows stay sortable. Only strings bound for DATE columns are
converted. Every other value passes through unchanged.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Sequence

from memory_engine.adapters.outbound.json_seed_loader import parse_datetime
from memory_engine.domain.entities import DataType, PredicateGroup, PredicateNode, QueryPlan
from memory_engine.domain.value_objects import scoped_name
from memory_engine.ports.inbound import QueryEngine

ColumnTypes = Mapping[str, DataType]


def table_column_types(engine: QueryEngine, table: str) -> dict[str, DataType]:
    """Declared type of every column of ``table``."""
    return {name: column.datatype for name, column in engine.describe(table).items()}


def plan_column_types(engine: QueryEngine, plan: QueryPlan) -> dict[str, DataType]:
    """Types of every column name a query's predicate can refer to.

    Base-table columns keep their names. A joined column is reachable as
    ``<alias>.<column>`` and under each select alias given to it.
    """
    types = table_column_types(engine, plan.base.real_name)
    for join in plan.joins:
        for name, datatype in table_column_types(engine, join.real_name).items():
            types[scoped_name(join.alias, name)] = datatype
            for column in plan.select:
                if column.table == join.alias and column.aggregate is None and column.column == name:
                    types[column.alias] = datatype
    return types


def decode_value(datatype: DataType | None, value: Any) -> Any:
    """Convert one JSON value to the column's type.

    Raises:
        ValueError: If a date column is given a string that is not ISO-8601.
    """
    if datatype is DataType.DATE and isinstance(value, str):
        return parse_datetime(value)
    return value


def decode_predicate(
    predicate: Sequence[PredicateNode], types: ColumnTypes
) -> tuple[PredicateNode, ...]:
    """Decode leaf values, including BETWEEN bounds and IN candidates."""
    return tuple(_decode_node(node, types) for node in predicate)


def _decode_node(node: PredicateNode, types: ColumnTypes) -> PredicateNode:
    if isinstance(node, PredicateGroup):
        return replace(node, nodes=decode_predicate(node.nodes, types))

    datatype = types.get(node.property)
    if datatype is not DataType.DATE:
        return node
    if isinstance(node.value, (list, tuple)):
        return replace(node, value=[decode_value(datatype, item) for item in node.value])
    return replace(node, value=decode_value(datatype, node.value))


def decode_rows(
    columns: Sequence[str], rows: Sequence[Sequence[Any]], types: ColumnTypes
) -> list[list[Any]]:
    """Decode positional insert/update values.

    Rows whose length does not match ``columns`` are left alone so the
    mutation executor can reject them.
    """
    column_types = [types.get(column) for column in columns]
    return [
        [decode_value(t, value) for t, value in zip(column_types, row)]
        if len(row) == len(columns) else list(row)
        for row in rows
    ]


def decode_record(record: Mapping[str, Any], types: ColumnTypes) -> dict[str, Any]:
    """Decode a keyed record, such as an implicit-update replacement."""
    return {name: decode_value(types.get(name), value) for name, value in record.items()}
