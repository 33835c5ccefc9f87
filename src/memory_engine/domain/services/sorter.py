"""Multi-key sorting of result rows.

Rows are compared by the first ORDER BY entry; ties fall through to the next
entry, and rows tied on every entry keep their original relative order
(``sorted`` is stable). DESC swaps the operands before the same comparator
runs, so both directions cascade identically.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Mapping, Sequence, TypeVar

from memory_engine.domain.entities.query import OrderBy
from memory_engine.domain.value_objects import SortDirection, compare_values

R = TypeVar("R", bound=Mapping[str, Any])


def compare_rows(left: Mapping[str, Any], right: Mapping[str, Any], order_by: Sequence[OrderBy]) -> int:
    """Compare two rows by an ORDER BY list.

    Raises:
        UnsupportedComparisonTypeError: If a column holds values with no
            defined ordering.
    """
    for entry in order_by:
        a, b = left.get(entry.alias), right.get(entry.alias)
        if entry.direction is SortDirection.DESC:
            a, b = b, a
        result = compare_values(a, b)
        if result != 0:
            return result
    return 0


def sort_rows(rows: Sequence[R], order_by: Sequence[OrderBy]) -> list[R]:
    """Return the rows ordered by the ORDER BY list."""
    if not order_by:
        return list(rows)
    return sorted(rows, key=cmp_to_key(lambda a, b: compare_rows(a, b, order_by)))
