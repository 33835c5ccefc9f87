"""Enumerations used to describe queries.

Values match the tokens the ORM layer sends, so raw strings coming from
outside can be converted with ``Chain("AND NOT")`` and friends.
"""

from __future__ import annotations

from enum import Enum


class Chain(Enum):
    """How a predicate node composes with the running result."""

    WHERE = "WHERE"
    WHERE_NOT = "WHERE NOT"
    AND = "AND"
    AND_NOT = "AND NOT"
    OR = "OR"
    OR_NOT = "OR NOT"

    @property
    def is_negated(self) -> bool:
        """Return True for the NOT variants."""
        return self.value.endswith("NOT")

    @property
    def is_conjunctive(self) -> bool:
        """Return True for WHERE and AND variants."""
        return not self.is_disjunctive

    @property
    def is_disjunctive(self) -> bool:
        """Return True for OR variants."""
        return self in (Chain.OR, Chain.OR_NOT)

    @property
    def is_opening(self) -> bool:
        """Return True if the chain may open a predicate sequence."""
        return self in (Chain.WHERE, Chain.WHERE_NOT)


class Operator(Enum):
    """Comparison operators understood by the predicate evaluator."""

    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    NE = "<>"
    EQ = "="
    BETWEEN = "BETWEEN"
    IN = "IN"
    IS = "IS"
    IS_NOT = "IS NOT"
    LIKE = "LIKE"


class SortDirection(Enum):
    """Direction of an ORDER BY entry."""

    ASC = "ASC"
    DESC = "DESC"


class AggregateFunc(Enum):
    """Aggregates computed per group."""

    COUNT = "count"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"


COUNT_ALIAS = "$$count"
"""Select alias meaning "return only the number of surviving rows"."""

GROUP_COUNT_COLUMN = "$count"
"""Column attached to every grouped record holding the partition size."""


def aggregate_column(func: AggregateFunc, column: str | None = None) -> str:
    """Name of the column holding an aggregate in a grouped record.

    >>> aggregate_column(AggregateFunc.SUM, "Mileage")
    '$sum_Mileage'
    """
    if func is AggregateFunc.COUNT:
        return GROUP_COUNT_COLUMN
    if column is None:
        raise ValueError(f"Aggregate {func.value} requires a column")
    return f"${func.value}_{column}"


def scoped_name(alias: str, column: str) -> str:
    """Default name of a joined column that has no select alias."""
    return f"{alias}.{column}"
