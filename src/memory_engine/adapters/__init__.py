"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (REST)
- Outbound adapters: Implement external dependencies (seed tables on disk or HTTP)
"""

from memory_engine.adapters.outbound import (
    HttpSeedSource,
    JsonDirectorySeedSource,
    fetch_database,
    load_database_from_directory,
)

__all__ = [
    # Outbound adapters
    "HttpSeedSource",
    "JsonDirectorySeedSource",
    "fetch_database",
    "load_database_from_directory",
]
