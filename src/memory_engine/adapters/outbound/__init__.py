"""Outbound adapters - implementations of outbound ports.

Exports:
    JSON seed loader:
        - load_database_from_directory: Read schema.json and data/<Table>.json
        - fetch_database: Fetch the same layout over HTTP with httpx
        - JsonDirectorySeedSource, HttpSeedSource: SeedSource implementations
        - seed_source_from_config: Pick a SeedSource from SeedConfig
        - parse_datetime: ISO-8601 parsing shared with request decoding
"""

from memory_engine.adapters.outbound.json_seed_loader import (
    CHINOOK_BASE_URL,
    HttpSeedSource,
    JsonDirectorySeedSource,
    coerce_rows,
    fetch_database,
    load_database_from_directory,
    parse_datetime,
    parse_schema,
    seed_source_from_config,
)

__all__ = [
    "CHINOOK_BASE_URL",
    "HttpSeedSource",
    "JsonDirectorySeedSource",
    "coerce_rows",
    "fetch_database",
    "load_database_from_directory",
    "parse_datetime",
    "parse_schema",
    "seed_source_from_config",
]
