"""Offset/limit slicing and output projection."""

from __future__ import annotations

from typing import Any, Mapping, Sequence, TypeVar

from memory_engine.domain.entities.database import Record
from memory_engine.domain.entities.query import SelectColumn
from memory_engine.domain.value_objects import COUNT_ALIAS

R = TypeVar("R")


def paginate(rows: Sequence[R], offset: int | None = None, limit: int | None = None) -> list[R]:
    """Apply offset and limit. ``None`` leaves either unset."""
    if offset is not None and offset < 0:
        raise ValueError(f"offset must be non-negative, got {offset}")
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    # limit=0 is a real limit and yields no rows; only None means unset
    if offset is not None:
        if limit is not None:
            return list(rows[offset:offset + limit])
        return list(rows[offset:])
    if limit is not None:
        return list(rows[:limit])
    return list(rows)


def is_row_count(select: Sequence[SelectColumn]) -> bool:
    """True when the select list is the single row-count sentinel."""
    return len(select) > 0 and select[0].alias == COUNT_ALIAS


def project(rows: Sequence[Mapping[str, Any]], select: Sequence[SelectColumn]) -> list[Record]:
    """Map rows to the requested output aliases.

    A row-count selection collapses the whole result into one record holding
    the number of rows, whatever shape the rows had. An empty select list
    returns the rows unchanged.
    """
    if is_row_count(select):
        return [{COUNT_ALIAS: len(rows)}]
    if not select:
        return [dict(row) for row in rows]
    return [{column.alias: _read(row, column) for column in select} for row in rows]


def _read(row: Mapping[str, Any], column: SelectColumn) -> Any:
    source = column.source
    if source in row:
        return row[source]
    # base-table columns are stored under their real name
    return row.get(column.column)
