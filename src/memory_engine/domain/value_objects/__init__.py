"""Value objects for the memory engine domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Values:
        - Value: Union of the storable field types
        - ValueKind: Closed set of value kinds
        - classify, compare_values, try_compare, strict_equals, is_numeric

    Query Types:
        - Chain: Predicate chain markers (WHERE, AND NOT, ...)
        - Operator: Predicate comparison operators
        - SortDirection: ASC / DESC
        - AggregateFunc: count, sum, avg, min, max
        - COUNT_ALIAS, GROUP_COUNT_COLUMN, aggregate_column, scoped_name

    Transaction Types:
        - TransactionId: Type-safe transaction identifier
        - TransactionState: ACTIVE, COMMITTED, ROLLED_BACK
"""

from memory_engine.domain.value_objects.query_types import (
    COUNT_ALIAS,
    GROUP_COUNT_COLUMN,
    AggregateFunc,
    Chain,
    Operator,
    SortDirection,
    aggregate_column,
    scoped_name,
)
from memory_engine.domain.value_objects.transaction_types import (
    TransactionId,
    TransactionState,
)
from memory_engine.domain.value_objects.values import (
    Value,
    ValueKind,
    classify,
    comparable,
    compare_values,
    is_numeric,
    strict_equals,
    try_compare,
    value_key,
)

__all__ = [
    # Values
    "Value",
    "ValueKind",
    "classify",
    "comparable",
    "compare_values",
    "is_numeric",
    "strict_equals",
    "try_compare",
    "value_key",
    # Query types
    "Chain",
    "Operator",
    "SortDirection",
    "AggregateFunc",
    "COUNT_ALIAS",
    "GROUP_COUNT_COLUMN",
    "aggregate_column",
    "scoped_name",
    # Transaction types
    "TransactionId",
    "TransactionState",
]
