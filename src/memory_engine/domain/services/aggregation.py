"""Grouping and per-group aggregation."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from memory_engine.domain.entities.database import Record
from memory_engine.domain.value_objects import (
    GROUP_COUNT_COLUMN,
    AggregateFunc,
    aggregate_column,
    is_numeric,
    value_key,
)


def partition(
    rows: Sequence[Mapping[str, Any]], group_keys: Sequence[str]
) -> dict[tuple[Any, ...], list[Mapping[str, Any]]]:
    """Split rows by the tuple of values at the group keys.

    Partitions come out in first-seen order and keep their members in input
    order. Keys are compared by kind and value, so ``1`` and ``1.0`` share a
    partition while ``1`` and ``True`` do not.
    """
    partitions: dict[tuple[Any, ...], list[Mapping[str, Any]]] = {}
    for row in rows:
        key = tuple(value_key(row.get(k)) for k in group_keys)
        partitions.setdefault(key, []).append(row)
    return partitions


def aggregate(members: Sequence[Mapping[str, Any]], group_keys: Sequence[str]) -> Record:
    """Collapse one partition into a single record.

    The record keeps the group key columns and, for every other column
    that is numeric in the first member, the sum, average, minimum and
    maximum across the partition. Null members are skipped for sum, min and
    max; the average divides by the partition size. Non-numeric non-key
    columns are dropped.
    """
    first = members[0]
    count = len(members)
    record: Record = {key: first.get(key) for key in group_keys}

    for column, sample in first.items():
        if column in group_keys or not is_numeric(sample):
            continue
        values = [m[column] for m in members if is_numeric(m.get(column))]
        total = sum(values)
        record[aggregate_column(AggregateFunc.SUM, column)] = total
        record[aggregate_column(AggregateFunc.AVG, column)] = total / count
        record[aggregate_column(AggregateFunc.MIN, column)] = min(values)
        record[aggregate_column(AggregateFunc.MAX, column)] = max(values)

    record[GROUP_COUNT_COLUMN] = count
    return record


def group_rows(rows: Sequence[Mapping[str, Any]], group_keys: Sequence[str]) -> list[Record]:
    """Partition rows by group keys and aggregate each partition."""
    if not group_keys:
        return [dict(row) for row in rows]
    return [aggregate(members, group_keys) for members in partition(rows, group_keys).values()]
