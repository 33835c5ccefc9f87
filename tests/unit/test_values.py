"""Unit tests for the value model."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from memory_engine.domain.errors import UnsupportedComparisonTypeError
from memory_engine.domain.value_objects import (
    ValueKind,
    classify,
    compare_values,
    strict_equals,
    try_compare,
    value_key,
)


@pytest.mark.unit
class TestClassify:
    """Tests for value kind classification."""

    def test_bool_is_not_a_number(self) -> None:
        """Booleans classify as BOOLEAN even though bool subclasses int."""
        assert classify(True) is ValueKind.BOOLEAN
        assert classify(1) is ValueKind.NUMBER
        assert classify(1.5) is ValueKind.NUMBER

    def test_dates_and_datetimes(self) -> None:
        """Both date and datetime are DATE."""
        assert classify(date(2024, 1, 1)) is ValueKind.DATE
        assert classify(datetime(2024, 1, 1, 12)) is ValueKind.DATE

    def test_unsupported(self) -> None:
        """Containers are not storable values."""
        assert classify([1, 2]) is ValueKind.UNSUPPORTED
        assert classify(None) is ValueKind.NULL


@pytest.mark.unit
class TestCompareValues:
    """Tests for three-way comparison."""

    def test_numbers(self) -> None:
        """Ints and floats compare by magnitude."""
        assert compare_values(1, 2) < 0
        assert compare_values(2.5, 2) > 0
        assert compare_values(3, 3.0) == 0

    def test_strings(self) -> None:
        """Strings compare lexicographically."""
        assert compare_values("Audi", "BMW") < 0
        assert compare_values("b", "a") > 0

    def test_null_sorts_first(self) -> None:
        """Null is smaller than any value and equal to itself."""
        assert compare_values(None, 0) < 0
        assert compare_values("a", None) > 0
        assert compare_values(None, None) == 0

    def test_date_widened_to_midnight(self) -> None:
        """A bare date compares equal to midnight of the same day."""
        assert compare_values(date(2024, 3, 1), datetime(2024, 3, 1)) == 0
        assert compare_values(date(2024, 3, 1), datetime(2024, 3, 1, 0, 1)) < 0

    def test_mixed_kinds_raise(self) -> None:
        """String against number has no ordering."""
        with pytest.raises(UnsupportedComparisonTypeError):
            compare_values("1", 1)

    def test_naive_and_aware_raise(self) -> None:
        """Naive and aware datetimes have no ordering."""
        aware = datetime(2024, 1, 1, tzinfo=timezone.utc)
        with pytest.raises(UnsupportedComparisonTypeError):
            compare_values(datetime(2024, 1, 1), aware)

    def test_unsupported_is_also_type_error(self) -> None:
        """The comparison error can be caught as a TypeError."""
        with pytest.raises(TypeError):
            compare_values([1], [1])

    def test_try_compare_returns_none(self) -> None:
        """try_compare reports incomparable values without raising."""
        assert try_compare("a", 1) is None
        assert try_compare(1, 2) == -1


@pytest.mark.unit
class TestStrictEquals:
    """Tests for kind-aware equality."""

    def test_same_kind(self) -> None:
        assert strict_equals(1, 1.0)
        assert strict_equals("Red", "Red")
        assert strict_equals(None, None)

    def test_different_kinds(self) -> None:
        """No coercion between kinds."""
        assert not strict_equals(True, 1)
        assert not strict_equals("1", 1)
        assert not strict_equals(None, 0)

    def test_value_key_collides_for_equal_values(self) -> None:
        """value_key agrees with strict_equals."""
        assert value_key(1) == value_key(1.0)
        assert value_key(True) != value_key(1)
        assert value_key(date(2024, 1, 1)) == value_key(datetime(2024, 1, 1))
