"""Value model shared by predicates, sorting and aggregation.

Values stored in a table are one of a closed set of kinds. Comparison is
defined once here as a total function over those kinds so the rest of the
engine never has to inspect runtime types itself.

Ordering rules:
    - NULL sorts before every other kind
    - STRING compares lexicographically
    - BOOLEAN compares as 0/1
    - NUMBER (int or float, never bool) compares by magnitude
    - DATE compares by instant; a bare ``date`` is widened to midnight

Mixing two different non-null kinds is a type error. There is no coercion
between string and numeric representations.
"""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum, auto
from typing import Any, Union

from memory_engine.domain.errors import UnsupportedComparisonTypeError

Value = Union[str, bool, int, float, date, datetime, None]
"""A single field value held in a record."""


class ValueKind(Enum):
    """Runtime kind of a stored value."""

    NULL = auto()
    BOOLEAN = auto()
    NUMBER = auto()
    STRING = auto()
    DATE = auto()
    UNSUPPORTED = auto()


def classify(value: Any) -> ValueKind:
    """Return the kind of a value.

    ``bool`` is checked before ``int`` because it is a subclass of it.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (date, datetime)):
        return ValueKind.DATE
    return ValueKind.UNSUPPORTED


def is_numeric(value: Any) -> bool:
    """Check whether a value can be aggregated."""
    return classify(value) is ValueKind.NUMBER


def _instant(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def comparable(left: Any, right: Any) -> bool:
    """Check whether compare_values() would succeed for these operands."""
    left_kind = classify(left)
    right_kind = classify(right)
    if ValueKind.UNSUPPORTED in (left_kind, right_kind):
        return False
    if ValueKind.NULL in (left_kind, right_kind):
        return True
    if left_kind is not right_kind:
        return False
    if left_kind is ValueKind.DATE:
        # naive and aware datetimes have no ordering between them
        return (_instant(left).tzinfo is None) == (_instant(right).tzinfo is None)
    return True


def compare_values(left: Any, right: Any) -> int:
    """Three-way comparison of two values.

    Returns:
        A negative number, zero or a positive number.

    Raises:
        UnsupportedComparisonTypeError: If the kinds have no ordering.
    """
    if not comparable(left, right):
        raise UnsupportedComparisonTypeError(left, right)

    left_kind = classify(left)
    right_kind = classify(right)

    if left_kind is ValueKind.NULL or right_kind is ValueKind.NULL:
        return (left_kind is not ValueKind.NULL) - (right_kind is not ValueKind.NULL)

    if left_kind is ValueKind.DATE:
        left, right = _instant(left), _instant(right)
    elif left_kind is ValueKind.BOOLEAN:
        return int(left) - int(right)

    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def try_compare(left: Any, right: Any) -> int | None:
    """Like compare_values() but returns None instead of raising."""
    if not comparable(left, right):
        return None
    return compare_values(left, right)


def value_key(value: Any) -> tuple[ValueKind, Any]:
    """Hashable key under which strictly equal values collide.

    Used for partitioning and uniqueness checks.
    """
    kind = classify(value)
    if kind is ValueKind.DATE:
        return kind, _instant(value)
    return kind, value


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that requires both operands to be of the same kind.

    ``1 == 1.0`` holds, ``True == 1`` does not, and ``None`` only equals
    ``None``.
    """
    left_kind = classify(left)
    if left_kind is not classify(right):
        return False
    if left_kind is ValueKind.DATE:
        if not comparable(left, right):
            return False
        return _instant(left) == _instant(right)
    return left == right
