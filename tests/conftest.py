"""Pytest configuration and fixtures for memory_engine tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest
from prometheus_client import CollectorRegistry

from memory_engine.application import DatabaseEngine
from memory_engine.domain.entities import Database
from memory_engine.infrastructure.config import EngineConfig
from memory_engine.infrastructure.metrics import MetricsRegistry

CAR_COLUMNS = ("Id", "Make", "Model", "Color", "Year", "Mileage", "DealershipId")

CAR_ROWS = [
    (1, "Ford", "Focus", "Red", 2019, 42000, 1),
    (2, "Toyota", "Corolla", "Blue", 2023, 5000, 1),
    (3, "Honda", "Civic", "Black", 2021, 21000, 2),
    (4, "Audi", "A4", "White", 2023, 3000, 2),
    (5, "Ford", "Mustang", "Red", 2020, 18000, 3),
    (6, "BMW", "X3", "Silver", 2022, 12000, 1),
    (7, "Toyota", "Camry", "Black", 2023, 1500, 3),
    (8, "Audi", "Q5", "Blue", 2018, 60000, 2),
    (9, "Honda", "Accord", "White", 2019, 38000, 1),
    (10, "Kia", "Soul", "Green", 2023, 800, None),
    (11, "Mazda", "CX-5", "Red", 2021, 25000, 2),
    (12, "Tesla", "Model 3", "White", 2022, 9000, 3),
    (13, "Subaru", "Outback", "Blue", 2020, 30000, 1),
    (14, "Nissan", "Leaf", "Silver", 2023, 2500, 2),
    (15, "Volvo", "XC60", "Black", 2017, 75000, 3),
]

CAR_SCHEMA: dict[str, dict[str, Any]] = {
    "Id": {"datatype": "int", "isPrimary": True, "isIdentity": True, "isNullable": False},
    "Make": {"datatype": "string", "isNullable": False},
    "Model": {"datatype": "string"},
    "Color": {"datatype": "string"},
    "Year": {"datatype": "int"},
    "Mileage": {"datatype": "int"},
    "DealershipId": {"datatype": "int"},
}

DEALERSHIP_SCHEMA: dict[str, dict[str, Any]] = {
    "Id": {"datatype": "int", "isPrimary": True, "isIdentity": True, "isNullable": False},
    "Name": {"datatype": "string", "isNullable": False},
    "City": {"datatype": "string"},
}

DEALERSHIP_ROWS = [
    {"Id": 1, "Name": "Downtown Motors", "City": "Springfield"},
    {"Id": 2, "Name": "Northside Autos", "City": "Shelbyville"},
    {"Id": 3, "Name": "Lakeview Cars", "City": "Capital City"},
]

# Composite primary key without an identity column
CAR_FEATURE_SCHEMA: dict[str, dict[str, Any]] = {
    "CarId": {"datatype": "int", "isPrimary": True, "isNullable": False},
    "Feature": {"datatype": "string", "isPrimary": True, "isNullable": False},
}

CAR_FEATURE_ROWS = [
    {"CarId": 1, "Feature": "Sunroof"},
    {"CarId": 1, "Feature": "Heated Seats"},
    {"CarId": 2, "Feature": "Sunroof"},
]


def car_records(count: int = len(CAR_ROWS)) -> list[dict[str, Any]]:
    """The first ``count`` Car rows as fresh records."""
    return [dict(zip(CAR_COLUMNS, row)) for row in CAR_ROWS[:count]]


def build_database(car_count: int = len(CAR_ROWS)) -> Database:
    """A fresh Car/Dealership/CarFeature database."""
    return Database.from_mappings(
        {"Car": CAR_SCHEMA, "Dealership": DEALERSHIP_SCHEMA, "CarFeature": CAR_FEATURE_SCHEMA},
        {
            "Car": car_records(car_count),
            "Dealership": [dict(row) for row in DEALERSHIP_ROWS],
            "CarFeature": [dict(row) for row in CAR_FEATURE_ROWS],
        },
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def database() -> Database:
    """Provide the 15-car database."""
    return build_database()


@pytest.fixture
def small_database() -> Database:
    """Provide a database holding only the first five cars."""
    return build_database(car_count=5)


@pytest.fixture
def cars() -> list[dict[str, Any]]:
    """Provide the 15 Car rows as plain records."""
    return car_records()


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def engine(database: Database, metrics_registry: MetricsRegistry) -> DatabaseEngine:
    """Provide an engine over the 15-car database."""
    return DatabaseEngine(database, config=EngineConfig(), metrics=metrics_registry)


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
