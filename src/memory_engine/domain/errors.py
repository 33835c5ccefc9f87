"""Errors raised by the memory engine.

Every error derives from EngineError so callers can catch the whole family.
Validation errors are raised before any table is written, so a caller that
catches one can rely on the store being exactly as it was before the call.
"""

from __future__ import annotations

from typing import Any, Sequence


class EngineError(Exception):
    """Base class for all engine errors."""

    pass


class TableNotFoundError(EngineError, KeyError):
    """Raised when an operation names a table the schema does not know."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Table '{table}' does not exist")
        self.table = table

    def __str__(self) -> str:
        return str(self.args[0])


class UniqueConstraintViolationError(EngineError):
    """Raised when an insert would duplicate a composite primary/unique key."""

    def __init__(self, table: str, columns: Sequence[str], key: tuple[Any, ...]) -> None:
        described = ", ".join(f"{c}={v!r}" for c, v in zip(columns, key))
        super().__init__(f"Duplicate key in '{table}': ({described})")
        self.table = table
        self.columns = tuple(columns)
        self.key = key


class NotNullViolationError(EngineError):
    """Raised when a non-nullable column is given a null value."""

    def __init__(self, table: str, column: str) -> None:
        super().__init__(f"Column '{table}.{column}' cannot be null")
        self.table = table
        self.column = column


class UnsupportedComparisonTypeError(EngineError, TypeError):
    """Raised when two values have no defined ordering between them."""

    def __init__(self, left: Any, right: Any) -> None:
        super().__init__(
            f"Cannot compare {type(left).__name__} with {type(right).__name__}"
        )
        self.left = left
        self.right = right


class MalformedPredicateError(EngineError):
    """Raised for predicate trees the evaluator cannot interpret.

    Unknown operators only raise this when strict predicate checking is on;
    otherwise they exclude the row.
    """

    def __init__(self, message: str, operator: str | None = None) -> None:
        super().__init__(message)
        self.operator = operator


class TransactionError(EngineError):
    """Raised on invalid transaction state transitions."""

    pass


class SeedLoadError(EngineError):
    """Raised when seed tables cannot be fetched or do not match their schema."""

    pass
