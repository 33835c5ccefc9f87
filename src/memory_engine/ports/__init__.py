"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to clients (QueryEngine, TransactionManager)
- Outbound ports: Dependencies on external systems (SeedSource)

Adapters implement these ports with concrete functionality.
"""

from memory_engine.ports.inbound import (
    QueryEngine,
    Transaction,
    TransactionManager,
    TransactionStats,
)
from memory_engine.ports.outbound import SeedSource

__all__ = [
    # Inbound ports
    "QueryEngine",
    "Transaction",
    "TransactionManager",
    "TransactionStats",
    # Outbound ports
    "SeedSource",
]
