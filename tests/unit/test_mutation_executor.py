"""Unit tests for MutationExecutor."""

from __future__ import annotations

import copy

import pytest

from memory_engine.domain.entities import (
    Database,
    ExplicitUpdate,
    ImplicitUpdate,
    and_,
    where,
)
from memory_engine.domain.errors import (
    NotNullViolationError,
    TableNotFoundError,
    UniqueConstraintViolationError,
)
from memory_engine.domain.services import MutationExecutor


@pytest.mark.unit
class TestInsert:
    """Tests for constrained inserts."""

    def test_identity_values_follow_row_count(self, small_database: Database) -> None:
        """Inserting three rows into a five-row table yields ids 6, 7, 8."""
        executor = MutationExecutor(small_database.schema)
        ids = executor.insert(
            small_database.data,
            "Car",
            ["Make", "Model", "Color"],
            [["Audi", "A3", "Red"], ["BMW", "i4", "Blue"], ["Kia", "EV6", "White"]],
        )

        assert ids == [6, 7, 8]
        assert [row["Id"] for row in small_database.rows("Car")[-3:]] == [6, 7, 8]

    def test_unsupplied_columns_are_null(self, small_database: Database) -> None:
        executor = MutationExecutor(small_database.schema)
        executor.insert(small_database.data, "Car", ["Make"], [["Audi"]])

        row = small_database.rows("Car")[-1]
        assert row == {
            "Id": 6,
            "Make": "Audi",
            "Model": None,
            "Color": None,
            "Year": None,
            "Mileage": None,
            "DealershipId": None,
        }

    def test_supplied_identity_is_ignored(self, small_database: Database) -> None:
        executor = MutationExecutor(small_database.schema)
        assert executor.insert(small_database.data, "Car", ["Id", "Make"], [[99, "Audi"]]) == [6]

    def test_default_value_producer(self) -> None:
        database = Database.from_mappings(
            {"Tag": {"Id": {"isPrimary": True, "isIdentity": True}, "Label": {"defaultValue": "new"}}}
        )
        executor = MutationExecutor(database.schema)
        executor.insert(database.data, "Tag", [], [[]])

        assert database.rows("Tag") == [{"Id": 1, "Label": "new"}]

    def test_unique_violation_leaves_table_unchanged(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        before = copy.deepcopy(database.rows("CarFeature"))

        with pytest.raises(UniqueConstraintViolationError) as exc_info:
            executor.insert(
                database.data,
                "CarFeature",
                ["CarId", "Feature"],
                [[3, "Sunroof"], [1, "Sunroof"]],
            )

        assert exc_info.value.columns == ("CarId", "Feature")
        assert database.rows("CarFeature") == before

    def test_duplicates_within_one_insert(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        with pytest.raises(UniqueConstraintViolationError):
            executor.insert(
                database.data, "CarFeature", ["CarId", "Feature"], [[4, "Tow Hitch"], [4, "Tow Hitch"]]
            )
        assert len(database.rows("CarFeature")) == 3

    def test_not_null_violation_leaves_table_unchanged(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)

        with pytest.raises(NotNullViolationError) as exc_info:
            executor.insert(database.data, "Car", ["Make", "Model"], [["Audi", "A3"], [None, "X5"]])

        assert exc_info.value.column == "Make"
        assert database.row_count("Car") == 15

    def test_unknown_column(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        with pytest.raises(ValueError):
            executor.insert(database.data, "Car", ["Wheels"], [[4]])

    def test_row_length_mismatch(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        with pytest.raises(ValueError):
            executor.insert(database.data, "Car", ["Make", "Model"], [["Audi"]])

    def test_unknown_table(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        with pytest.raises(TableNotFoundError):
            executor.insert(database.data, "Boat", ["Make"], [["Riva"]])


@pytest.mark.unit
class TestUpdateDeleteTruncate:
    """Tests for update, delete and truncate."""

    def test_explicit_update(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        affected = executor.update(
            database.data, "Car", ["Color"], [where("Color", "=", "Red")], explicit=ExplicitUpdate(["Crimson"])
        )

        assert affected == 3
        colors = [row["Color"] for row in database.rows("Car")]
        assert colors.count("Crimson") == 3
        assert "Red" not in colors

    def test_explicit_update_length_mismatch(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        with pytest.raises(ValueError):
            executor.update(
                database.data, "Car", ["Color", "Year"], None, explicit=ExplicitUpdate(["Crimson"])
            )

    def test_implicit_update_replaces_by_primary_key(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        replacement = {**database.rows("Car")[1], "Mileage": 6000}
        affected = executor.update(
            database.data,
            "Car",
            [],
            [where("Year", "=", 2023)],
            implicit=ImplicitUpdate(objects=[replacement]),
        )

        assert affected == 1
        assert database.rows("Car")[1]["Mileage"] == 6000
        assert database.rows("Car")[1] is not replacement

    def test_implicit_then_explicit(self, database: Database) -> None:
        """Both modes count their own changes."""
        executor = MutationExecutor(database.schema)
        replacement = {**database.rows("Car")[0], "Model": "Fiesta"}
        affected = executor.update(
            database.data,
            "Car",
            ["Color"],
            [where("Id", "=", 1)],
            explicit=ExplicitUpdate(["Orange"]),
            implicit=ImplicitUpdate(primary_keys=["Id"], objects=[replacement]),
        )

        assert affected == 2
        assert database.rows("Car")[0]["Model"] == "Fiesta"
        assert database.rows("Car")[0]["Color"] == "Orange"

    def test_delete_matching_rows(self, database: Database) -> None:
        """Deleting the red cars removes 3 of 15."""
        executor = MutationExecutor(database.schema)
        removed = executor.delete(database.data, "Car", [where("Color", "=", "Red")])

        assert removed == 3
        assert database.row_count("Car") == 12

    def test_delete_without_predicate(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        assert executor.delete(database.data, "Dealership", None) == 3
        assert database.rows("Dealership") == []

    def test_delete_compound(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        removed = executor.delete(
            database.data, "Car", [where("Year", "=", 2023), and_("Make", "=", "Toyota")]
        )
        assert removed == 2

    def test_truncate(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        assert executor.truncate(database.data, "Car") == 15
        assert database.rows("Car") == []
        assert executor.truncate(database.data, "Car") == 0

    def test_describe(self, database: Database) -> None:
        executor = MutationExecutor(database.schema)
        columns = executor.describe("Car")

        assert list(columns) == ["Id", "Make", "Model", "Color", "Year", "Mileage", "DealershipId"]
        assert columns["Id"].is_identity
        with pytest.raises(TypeError):
            columns["Wheels"] = columns["Id"]  # type: ignore[index]
