"""Unit tests for multi-key sorting."""

from __future__ import annotations

from typing import Any

import pytest

from memory_engine.domain.entities import OrderBy
from memory_engine.domain.errors import UnsupportedComparisonTypeError
from memory_engine.domain.services import sort_rows
from memory_engine.domain.value_objects import SortDirection


@pytest.mark.unit
class TestSortRows:
    """Tests for sort_rows."""

    def test_year_desc_mileage_asc(self, cars: list[dict[str, Any]]) -> None:
        order = [OrderBy("Year", SortDirection.DESC), OrderBy("Mileage")]
        rows = sort_rows(cars, order)

        assert [row["Id"] for row in rows] == [10, 7, 14, 4, 2, 12, 6, 3, 11, 5, 13, 9, 1, 8, 15]

    def test_stable_for_ties(self, cars: list[dict[str, Any]]) -> None:
        rows = sort_rows(cars, [OrderBy("Color")])
        black = [row["Id"] for row in rows if row["Color"] == "Black"]
        assert black == [3, 7, 15]

    def test_null_sorts_first(self) -> None:
        rows = sort_rows([{"v": 2}, {"v": None}, {"v": 1}], [OrderBy("v")])
        assert [row["v"] for row in rows] == [None, 1, 2]

    def test_mixed_kinds_raise(self) -> None:
        with pytest.raises(UnsupportedComparisonTypeError):
            sort_rows([{"v": "a"}, {"v": 1}], [OrderBy("v")])
