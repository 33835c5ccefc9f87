"""Inbound ports - API contracts for the memory engine.

Inbound ports define the interfaces that the ORM layer and the REST
adapter use to talk to the engine.
"""

from memory_engine.ports.inbound.query_engine import QueryEngine
from memory_engine.ports.inbound.transaction_manager import (
    Transaction,
    TransactionManager,
    TransactionStats,
)

__all__ = [
    # Query Engine
    "QueryEngine",
    # Transaction Manager
    "Transaction",
    "TransactionManager",
    "TransactionStats",
]
