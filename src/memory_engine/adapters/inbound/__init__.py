"""Inbound adapters for the memory engine.

Inbound adapters handle incoming requests and convert them to engine
operations.

Exports:
    REST API:
        - create_app: Create a FastAPI application
        - run_server: Run the REST API server with uvicorn
"""

from memory_engine.adapters.inbound.rest_api import (
    QueryRequest,
    RowsResponse,
    create_app,
    run_server,
)

__all__ = [
    "create_app",
    "run_server",
    "QueryRequest",
    "RowsResponse",
]
