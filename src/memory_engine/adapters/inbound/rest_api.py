"""REST API adapter for the memory engine.

This module exposes a QueryEngine (normally a DatabaseEngine) over HTTP with
FastAPI. Request bodies use the same shapes the ORM layer sends: predicates
are lists of leaf objects and nested lists, table descriptors use camelCase
keys.

Endpoints:
    GET  /health                  - Health check
    GET  /stats                   - Engine statistics
    GET  /tables/{table}          - Column metadata
    POST /query                   - Run a query
    POST /tables/{table}/insert   - Insert rows
    POST /tables/{table}/update   - Update matching rows
    POST /tables/{table}/delete   - Delete matching rows
    POST /tables/{table}/truncate - Remove every row

Engine errors map to status codes: unknown tables to 404, constraint
violations and transaction conflicts to 409, malformed predicates and
incomparable values to 400.

JSON carries dates as ISO-8601 strings; values bound for date columns in
predicates, inserts and updates are parsed before they reach the engine.

Usage:
    from memory_engine.adapters.inbound.rest_api import create_app

    app = create_app(engine)
    # Run with uvicorn: uvicorn app:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Literal

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from memory_engine import __version__
from memory_engine.adapters.inbound.value_decoding import (
    decode_predicate,
    decode_record,
    decode_rows,
    plan_column_types,
    table_column_types,
)
from memory_engine.application import DatabaseEngine
from memory_engine.domain.entities import ExplicitUpdate, ImplicitUpdate, QueryPlan, parse_predicate
from memory_engine.domain.errors import (
    EngineError,
    MalformedPredicateError,
    NotNullViolationError,
    TableNotFoundError,
    TransactionError,
    UniqueConstraintViolationError,
    UnsupportedComparisonTypeError,
)
from memory_engine.infrastructure.logging import get_logger
from memory_engine.ports.inbound import QueryEngine

logger = get_logger(__name__)


# =============================================================================
# Request / response models
# =============================================================================


class TableRef(BaseModel):
    """A table taking part in a query; the first one is the base table."""

    model_config = ConfigDict(populate_by_name=True)

    real_name: str = Field(..., alias="realName", description="Table name in the schema")
    alias: str | None = Field(None, description="Alias used for joined columns")
    referer_key: str | None = Field(None, alias="refererKey", description="Column in the accumulated rows")
    reference_key: str | None = Field(None, alias="referenceKey", description="Column in this table")


class OrderByItem(BaseModel):
    """One ORDER BY entry."""

    alias: str
    direction: Literal["ASC", "DESC"] = "ASC"


class SelectItem(BaseModel):
    """One output column."""

    alias: str
    table: str | None = None
    column: str | None = None
    aggregate: Literal["count", "sum", "avg", "min", "max"] | None = None


class QueryRequest(BaseModel):
    """Request model for a query."""

    model_config = ConfigDict(populate_by_name=True)

    tables: list[TableRef] = Field(..., alias="from", min_length=1, description="Base table first")
    where: list[Any] | None = Field(None, description="Predicate in list form")
    group_by: list[str] = Field(default_factory=list)
    order_by: list[OrderByItem] = Field(default_factory=list)
    offset: int | None = Field(None, ge=0)
    limit: int | None = Field(None, ge=0)
    select: list[SelectItem] = Field(default_factory=list)


class RowsResponse(BaseModel):
    """Response model for a query."""

    rows: list[dict[str, Any]] = Field(default_factory=list, description="Result rows")
    count: int = Field(0, description="Number of rows returned")


class InsertRequest(BaseModel):
    """Request model for an insert."""

    columns: list[str] = Field(..., description="Column names, in value order")
    values: list[list[Any]] = Field(..., description="One value list per row")


class InsertResponse(BaseModel):
    """Response model for an insert."""

    ids: list[int] = Field(default_factory=list, description="Assigned identity values")


class ImplicitUpdateModel(BaseModel):
    """Replacement records matched by primary key."""

    model_config = ConfigDict(populate_by_name=True)

    primary_keys: list[str] = Field(default_factory=list, alias="primaryKeys")
    objects: list[dict[str, Any]] = Field(default_factory=list)


class UpdateRequest(BaseModel):
    """Request model for an update."""

    columns: list[str] = Field(default_factory=list)
    where: list[Any] | None = None
    explicit: list[Any] | None = Field(None, description="Values for columns, in order")
    implicit: ImplicitUpdateModel | None = None


class DeleteRequest(BaseModel):
    """Request model for a delete."""

    where: list[Any] | None = None


class AffectedResponse(BaseModel):
    """Response model for update, delete and truncate."""

    affected_rows: int = Field(0, description="Number of rows changed or removed")


class ColumnResponse(BaseModel):
    """Column metadata."""

    field: str
    datatype: str
    is_primary: bool
    is_identity: bool
    is_nullable: bool
    is_unique: bool


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


_STATUS_BY_ERROR: list[tuple[type[EngineError], int]] = [
    (TableNotFoundError, 404),
    (UniqueConstraintViolationError, 409),
    (NotNullViolationError, 409),
    (TransactionError, 409),
    (MalformedPredicateError, 400),
    (UnsupportedComparisonTypeError, 400),
]


def status_for(error: EngineError) -> int:
    """HTTP status code for an engine error."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def create_app(engine: QueryEngine) -> FastAPI:
    """Create a FastAPI application for the memory engine.

    Args:
        engine: The engine to serve.

    Returns:
        A configured FastAPI application.
    """
    app = FastAPI(
        title="Memory Engine API",
        description="REST API over the in-memory relational engine",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EngineError)
    async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
        status = status_for(exc)
        logger.info("request_rejected", path=request.url.path, status=status, error=str(exc))
        return JSONResponse(
            status_code=status,
            content={"detail": str(exc), "error": type(exc).__name__},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        # Unknown columns and value/column count mismatches
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc), "error": type(exc).__name__},
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__)

    @app.get("/stats", tags=["Stats"])
    async def get_stats() -> dict[str, Any]:
        """Get engine statistics."""
        return engine.get_stats()

    @app.get("/tables/{table}", response_model=list[ColumnResponse], tags=["Schema"])
    async def describe_table(table: str) -> list[ColumnResponse]:
        """Get a table's column metadata."""
        return [
            ColumnResponse(
                field=column.field,
                datatype=column.datatype.value,
                is_primary=column.is_primary,
                is_identity=column.is_identity,
                is_nullable=column.is_nullable,
                is_unique=bool(column.is_unique),
            )
            for column in engine.describe(table).values()
        ]

    @app.post("/query", response_model=RowsResponse, tags=["Query"])
    async def run_query(request: QueryRequest) -> RowsResponse:
        """Run a query.

        Args:
            request: Tables, predicate, grouping, ordering, paging and selection.

        Returns:
            The result rows.
        """
        plan = QueryPlan.from_mapping(request.model_dump(by_alias=True))
        if plan.predicate:
            types = plan_column_types(engine, plan)
            plan = replace(plan, predicate=decode_predicate(plan.predicate, types))
        rows = engine.execute_plan(plan)
        return RowsResponse(rows=rows, count=len(rows))

    @app.post("/tables/{table}/insert", response_model=InsertResponse, tags=["Mutations"])
    async def insert_rows(table: str, request: InsertRequest) -> InsertResponse:
        """Insert rows into a table."""
        types = table_column_types(engine, table)
        values = decode_rows(request.columns, request.values, types)
        return InsertResponse(ids=engine.insert(table, request.columns, values))

    @app.post("/tables/{table}/update", response_model=AffectedResponse, tags=["Mutations"])
    async def update_rows(table: str, request: UpdateRequest) -> AffectedResponse:
        """Update rows matching a predicate."""
        if request.explicit is None and request.implicit is None:
            raise HTTPException(status_code=422, detail="Either explicit or implicit is required")

        types = table_column_types(engine, table)
        explicit = None
        if request.explicit is not None:
            explicit = ExplicitUpdate(values=decode_rows(request.columns, [request.explicit], types)[0])
        implicit = None
        if request.implicit is not None:
            implicit = ImplicitUpdate(
                primary_keys=request.implicit.primary_keys,
                objects=[decode_record(obj, types) for obj in request.implicit.objects],
            )
        affected = engine.update(
            table,
            request.columns,
            decode_predicate(parse_predicate(request.where), types),
            explicit=explicit,
            implicit=implicit,
        )
        return AffectedResponse(affected_rows=affected)

    @app.post("/tables/{table}/delete", response_model=AffectedResponse, tags=["Mutations"])
    async def delete_rows(table: str, request: DeleteRequest) -> AffectedResponse:
        """Delete rows matching a predicate."""
        predicate = decode_predicate(parse_predicate(request.where), table_column_types(engine, table))
        removed = engine.delete(table, predicate)
        return AffectedResponse(affected_rows=removed)

    @app.post("/tables/{table}/truncate", response_model=AffectedResponse, tags=["Mutations"])
    async def truncate_table(table: str) -> AffectedResponse:
        """Remove every row of a table."""
        return AffectedResponse(affected_rows=engine.truncate(table))

    return app


def run_server(
    engine: QueryEngine,
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Run the REST API server.

    Args:
        engine: The engine to serve.
        host: Host to bind to.
        port: Port to bind to.
    """
    import uvicorn

    app = create_app(engine)
    uvicorn.run(app, host=host, port=port)


def main() -> None:
    """Configure observability, load the seed tables and serve the engine."""
    from memory_engine.adapters.outbound.json_seed_loader import seed_source_from_config
    from memory_engine.domain.entities import Database, SchemaRegistry
    from memory_engine.infrastructure import get_config, setup_logging, setup_metrics, setup_tracing

    config = get_config()
    setup_logging(config.observability.log_level, config.observability.log_format)
    setup_tracing(config.observability.otel_service_name, config.observability.otel_endpoint)
    metrics = setup_metrics(config.server.metrics_port)

    source = seed_source_from_config(config.seed)
    if source is None:
        logger.warning("no_seed_configured")
        engine = DatabaseEngine(Database(SchemaRegistry()), config=config.engine, metrics=metrics)
    else:
        engine = DatabaseEngine.from_seed(source, config=config.engine, metrics=metrics)

    run_server(engine, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
