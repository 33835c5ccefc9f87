"""Integration tests for the REST API adapter."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient

from memory_engine.adapters.inbound import create_app
from memory_engine.application import DatabaseEngine
from memory_engine.domain.entities import Database
from memory_engine.infrastructure.metrics import MetricsRegistry
from memory_engine.ports.inbound import QueryEngine

RED = [{"chain": "WHERE", "operator": "=", "property": "Color", "value": "Red"}]


@pytest.mark.integration
class TestRestApi:
    """Tests for the FastAPI application."""

    @pytest.fixture
    def client(self, engine: DatabaseEngine) -> TestClient:
        return TestClient(create_app(engine))

    def query(self, client: TestClient, body: dict[str, Any]) -> Any:
        return client.post("/query", json=body)

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_stats(self, client: TestClient) -> None:
        stats = client.get("/stats").json()
        assert stats["tables"]["Car"] == 15
        assert stats["in_transaction"] is False

    def test_describe(self, client: TestClient) -> None:
        columns = client.get("/tables/Dealership").json()

        assert [c["field"] for c in columns] == ["Id", "Name", "City"]
        assert columns[0]["is_identity"] is True
        assert columns[1]["is_nullable"] is False

    def test_describe_unknown_table(self, client: TestClient) -> None:
        response = client.get("/tables/Boat")

        assert response.status_code == 404
        assert response.json()["error"] == "TableNotFoundError"

    def test_query(self, client: TestClient) -> None:
        response = self.query(
            client,
            {
                "from": [
                    {"realName": "Car"},
                    {"realName": "Dealership", "alias": "d", "refererKey": "DealershipId", "referenceKey": "Id"},
                ],
                "where": RED,
                "order_by": [{"alias": "Mileage", "direction": "DESC"}],
                "select": [{"alias": "Model"}, {"alias": "Dealer", "table": "d", "column": "Name"}],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert body["rows"][0] == {"Model": "Focus", "Dealer": "Downtown Motors"}

    def test_grouped_query(self, client: TestClient) -> None:
        body = self.query(
            client,
            {
                "from": [{"realName": "Car"}],
                "group_by": ["Year"],
                "order_by": [{"alias": "Year", "direction": "DESC"}],
                "limit": 1,
                "select": [{"alias": "Year"}, {"alias": "Cars", "aggregate": "count"}],
            },
        ).json()

        assert body["rows"] == [{"Year": 2023, "Cars": 5}]

    def test_malformed_predicate(self, client: TestClient) -> None:
        response = self.query(
            client,
            {"from": [{"realName": "Car"}], "where": [{"chain": "OR", "operator": "=", "property": "Make"}]},
        )
        assert response.status_code == 400

    def test_request_validation(self, client: TestClient) -> None:
        assert self.query(client, {"from": []}).status_code == 422
        assert self.query(client, {"from": [{"realName": "Car"}], "limit": -1}).status_code == 422

    def test_insert(self, client: TestClient) -> None:
        response = client.post(
            "/tables/Dealership/insert",
            json={"columns": ["Name", "City"], "values": [["Hillside Motors", "Ogdenville"]]},
        )

        assert response.status_code == 200
        assert response.json() == {"ids": [4]}

    def test_insert_not_null_violation(self, client: TestClient) -> None:
        response = client.post(
            "/tables/Dealership/insert", json={"columns": ["Name"], "values": [[None]]}
        )
        assert response.status_code == 409
        assert response.json()["error"] == "NotNullViolationError"

    def test_insert_unknown_column(self, client: TestClient) -> None:
        response = client.post(
            "/tables/Dealership/insert", json={"columns": ["Owner"], "values": [["Sam"]]}
        )
        assert response.status_code == 400

    def test_update(self, client: TestClient, engine: DatabaseEngine) -> None:
        response = client.post(
            "/tables/Car/update",
            json={"columns": ["Color"], "where": RED, "explicit": ["Crimson"]},
        )

        assert response.json() == {"affected_rows": 3}
        assert sum(row["Color"] == "Crimson" for row in engine.database.rows("Car")) == 3

    def test_update_requires_a_mode(self, client: TestClient) -> None:
        response = client.post("/tables/Car/update", json={"columns": ["Color"], "where": RED})
        assert response.status_code == 422

    def test_delete_and_truncate(self, client: TestClient) -> None:
        assert client.post("/tables/Car/delete", json={"where": RED}).json() == {"affected_rows": 3}
        assert client.post("/tables/Car/truncate").json() == {"affected_rows": 12}

    def test_engine_satisfies_port(self, engine: DatabaseEngine) -> None:
        assert isinstance(engine, QueryEngine)


def invoice_database() -> Database:
    """Invoices with a date column, joined to customers with one of their own."""
    return Database.from_mappings(
        {
            "Invoice": {
                "Id": {"datatype": "int", "isPrimary": True, "isIdentity": True, "isNullable": False},
                "CustomerId": {"datatype": "int"},
                "At": {"datatype": "date"},
            },
            "Customer": {
                "Id": {"datatype": "int", "isPrimary": True, "isIdentity": True, "isNullable": False},
                "Since": {"datatype": "date"},
            },
        },
        {
            "Invoice": [
                {"Id": 1, "CustomerId": 1, "At": datetime(2010, 1, 1)},
                {"Id": 2, "CustomerId": 2, "At": datetime(2012, 6, 1)},
            ],
            "Customer": [
                {"Id": 1, "Since": datetime(2009, 5, 1)},
                {"Id": 2, "Since": datetime(2011, 3, 1)},
            ],
        },
    )


def leaf(prop: str, operator: str, value: Any, chain: str = "WHERE") -> dict[str, Any]:
    return {"chain": chain, "operator": operator, "property": prop, "value": value}


@pytest.mark.integration
class TestDateValues:
    """ISO-8601 strings sent for date columns are compared and stored as dates."""

    @pytest.fixture
    def invoices(self, metrics_registry: MetricsRegistry) -> DatabaseEngine:
        return DatabaseEngine(invoice_database(), metrics=metrics_registry)

    @pytest.fixture
    def client(self, invoices: DatabaseEngine) -> TestClient:
        return TestClient(create_app(invoices))

    def ids(self, response: Any) -> list[int]:
        assert response.status_code == 200
        return [row["Id"] for row in response.json()["rows"]]

    def test_date_predicate(self, client: TestClient) -> None:
        response = client.post(
            "/query",
            json={"from": [{"realName": "Invoice"}], "where": [leaf("At", ">", "2011-01-01T00:00:00")]},
        )
        assert self.ids(response) == [2]

    def test_date_range_and_membership(self, client: TestClient) -> None:
        between = leaf("At", "BETWEEN", ["2009-06-01T00:00:00", "2011-01-01T00:00:00"])
        response = client.post("/query", json={"from": [{"realName": "Invoice"}], "where": [between]})
        assert self.ids(response) == [1]

        within = leaf("At", "IN", ["2012-06-01T00:00:00"])
        response = client.post("/query", json={"from": [{"realName": "Invoice"}], "where": [within]})
        assert self.ids(response) == [2]

    def test_joined_date_columns(self, client: TestClient) -> None:
        tables = [
            {"realName": "Invoice"},
            {"realName": "Customer", "alias": "c", "refererKey": "CustomerId", "referenceKey": "Id"},
        ]
        scoped = client.post(
            "/query", json={"from": tables, "where": [leaf("c.Since", "<", "2010-01-01T00:00:00")]}
        )
        assert self.ids(scoped) == [1]

        aliased = client.post(
            "/query",
            json={
                "from": tables,
                "where": [leaf("CustomerSince", ">", "2010-01-01T00:00:00")],
                "select": [{"alias": "Id"}, {"alias": "CustomerSince", "table": "c", "column": "Since"}],
            },
        )
        assert self.ids(aliased) == [2]

    def test_inserted_dates_stay_sortable(
        self, client: TestClient, invoices: DatabaseEngine
    ) -> None:
        response = client.post(
            "/tables/Invoice/insert",
            json={"columns": ["CustomerId", "At"], "values": [[1, "2013-01-01T00:00:00"]]},
        )
        assert response.json() == {"ids": [3]}
        assert invoices.database.rows("Invoice")[2]["At"] == datetime(2013, 1, 1)

        response = client.post(
            "/query",
            json={"from": [{"realName": "Invoice"}], "order_by": [{"alias": "At", "direction": "DESC"}]},
        )
        assert self.ids(response) == [3, 2, 1]
        assert response.json()["rows"][0]["At"] == "2013-01-01T00:00:00"

    def test_update_and_delete_decode_dates(
        self, client: TestClient, invoices: DatabaseEngine
    ) -> None:
        response = client.post(
            "/tables/Invoice/update",
            json={
                "columns": ["At"],
                "where": [leaf("At", "<", "2011-01-01T00:00:00")],
                "explicit": ["2014-02-01T00:00:00"],
            },
        )
        assert response.json() == {"affected_rows": 1}
        assert invoices.database.rows("Invoice")[0]["At"] == datetime(2014, 2, 1)

        response = client.post(
            "/tables/Invoice/delete", json={"where": [leaf("At", ">", "2013-01-01T00:00:00")]}
        )
        assert response.json() == {"affected_rows": 1}
        assert [row["Id"] for row in invoices.database.rows("Invoice")] == [2]

    def test_implicit_update_decodes_dates(
        self, client: TestClient, invoices: DatabaseEngine
    ) -> None:
        response = client.post(
            "/tables/Invoice/update",
            json={
                "columns": ["At"],
                "where": [leaf("Id", "=", 2)],
                "implicit": {
                    "primaryKeys": ["Id"],
                    "objects": [{"Id": 2, "CustomerId": 2, "At": "2015-03-01T00:00:00"}],
                },
            },
        )
        assert response.json() == {"affected_rows": 1}
        assert invoices.database.rows("Invoice")[1]["At"] == datetime(2015, 3, 1)

    def test_invalid_date_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/tables/Invoice/insert", json={"columns": ["At"], "values": [["next tuesday"]]}
        )
        assert response.status_code == 400
