"""JSON seed loader for Chinook-style table dumps.

The layout is the one published by the chinook-database-json project:

    <root>/schema.json          list of {"name": ..., "schema": {...}}
    <root>/data/<Table>.json    list of row objects

Each table schema is a Frictionless-style descriptor with a ``fields`` list
and a ``primaryKey`` that is either one field name or a list of them.
Field types are mapped onto engine data types; ``required`` fields become
non-nullable and datetime columns are parsed from ISO-8601 strings.

The root can be a local directory or a base URL fetched with httpx.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from memory_engine.domain.entities import Database, DataType, Record, SchemaRegistry
from memory_engine.domain.errors import SeedLoadError
from memory_engine.infrastructure.config import SeedConfig

logger = logging.getLogger(__name__)

CHINOOK_BASE_URL = "https://raw.githubusercontent.com/marko-knoebl/chinook-database-json/master/src"

SCHEMA_FILE = "schema.json"
DATA_DIR = "data"

TYPE_MAP: dict[str, DataType] = {
    "string": DataType.STRING,
    "integer": DataType.INT,
    "decimal(10,2)": DataType.FLOAT,
    "number": DataType.FLOAT,
    "boolean": DataType.BOOLEAN,
    "datetime": DataType.DATE,
    "date": DataType.DATE,
}

_datetime_adapter = TypeAdapter(datetime)


# =============================================================================
# Schema document models
# =============================================================================


class FieldConstraints(BaseModel):
    """Constraints block of a field descriptor."""

    required: bool = False


class FieldDescriptor(BaseModel):
    """One field of a table schema."""

    name: str
    type: str = "string"
    constraints: FieldConstraints = Field(default_factory=FieldConstraints)


class TableSchema(BaseModel):
    """A table's field list and primary key."""

    model_config = ConfigDict(populate_by_name=True)

    fields: list[FieldDescriptor]
    primary_key: str | list[str] | None = Field(default=None, alias="primaryKey")

    @property
    def primary_key_fields(self) -> set[str]:
        if self.primary_key is None:
            return set()
        if isinstance(self.primary_key, str):
            return {self.primary_key}
        return set(self.primary_key)


class TableDescriptor(BaseModel):
    """One entry of schema.json."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    table_schema: TableSchema = Field(alias="schema")


_schema_document = TypeAdapter(list[TableDescriptor])


# =============================================================================
# Conversion
# =============================================================================


def parse_schema(document: Any) -> SchemaRegistry:
    """Turn a parsed schema.json document into a SchemaRegistry.

    Raises:
        SeedLoadError: If the document is malformed or uses an unknown type.
    """
    try:
        tables = _schema_document.validate_python(document)
    except ValidationError as e:
        raise SeedLoadError(f"Invalid schema document: {e}") from e

    raw: dict[str, dict[str, Any]] = {}
    for table in tables:
        keys = table.table_schema.primary_key_fields
        columns: dict[str, Any] = {}
        for descriptor in table.table_schema.fields:
            datatype = TYPE_MAP.get(descriptor.type.lower())
            if datatype is None:
                raise SeedLoadError(
                    f"Unsupported field type {descriptor.type!r} for {table.name}.{descriptor.name}"
                )
            columns[descriptor.name] = {
                "datatype": datatype,
                "isPrimary": descriptor.name in keys,
                "isNullable": not descriptor.constraints.required,
            }
        raw[table.name] = columns
    return SchemaRegistry.from_mapping(raw)


def coerce_rows(schema: SchemaRegistry, table: str, rows: Any) -> list[Record]:
    """Convert JSON rows to engine records using the table's column types.

    Floats are widened from JSON integers and date columns are parsed.
    Columns missing from a row are stored as null.
    """
    if not isinstance(rows, list):
        raise SeedLoadError(f"Data for {table} must be a list of rows")

    columns = schema.columns(table)
    records: list[Record] = []
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise SeedLoadError(f"Row {index} of {table} is not an object")
        record: Record = {}
        for name, column in columns.items():
            record[name] = _coerce(table, name, column.datatype, row.get(name))
        records.append(record)
    return records


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 date or datetime the way date columns are loaded.

    Raises:
        pydantic.ValidationError: If the value is not a valid date. It is a
            ValueError subclass.
    """
    return _datetime_adapter.validate_python(value)


def _coerce(table: str, column: str, datatype: DataType, value: Any) -> Any:
    if value is None:
        return None
    try:
        if datatype is DataType.DATE:
            return parse_datetime(value)
        if datatype is DataType.FLOAT and not isinstance(value, bool):
            return float(value)
    except (ValidationError, TypeError, ValueError) as e:
        raise SeedLoadError(f"Bad {datatype.value} value {value!r} in {table}.{column}") from e
    return value


def _select_tables(schema: SchemaRegistry, tables: Iterable[str] | None) -> list[str]:
    selected = list(tables) if tables is not None else schema.tables
    unknown = [t for t in selected if not schema.has_table(t)]
    if unknown:
        raise SeedLoadError(f"Tables not in schema: {', '.join(unknown)}")
    return selected


# =============================================================================
# Loaders
# =============================================================================


def load_database_from_directory(
    path: str | Path, tables: Iterable[str] | None = None
) -> Database:
    """Load schema.json and data/<Table>.json from a directory.

    Args:
        path: Directory holding the dump.
        tables: Tables to load rows for. Defaults to every table in the schema.
            Tables without a data file start empty.

    Raises:
        SeedLoadError: If a file is unreadable or malformed.
    """
    root = Path(path)
    schema = parse_schema(_read_json(root / SCHEMA_FILE))

    data: dict[str, list[Record]] = {}
    for table in _select_tables(schema, tables):
        data_file = root / DATA_DIR / f"{table}.json"
        if not data_file.exists():
            logger.debug("No data file for %s, starting empty", table)
            continue
        data[table] = coerce_rows(schema, table, _read_json(data_file))

    logger.info("Loaded %d tables from %s", len(data), root)
    return Database(schema=schema, data=data)


def fetch_database(
    base_url: str = CHINOOK_BASE_URL,
    tables: Iterable[str] | None = None,
    client: httpx.Client | None = None,
    timeout: float = 30.0,
) -> Database:
    """Fetch schema.json and data/<Table>.json over HTTP.

    Args:
        base_url: URL the dump is served under.
        tables: Tables to fetch rows for. Defaults to every table in the schema.
        client: Optional httpx client (e.g. one with a MockTransport).
        timeout: Request timeout when no client is given.

    Raises:
        SeedLoadError: On HTTP errors or malformed documents.
    """
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout)
    base = base_url.rstrip("/")

    try:
        schema = parse_schema(_get_json(http, f"{base}/{SCHEMA_FILE}"))
        data = {
            table: coerce_rows(schema, table, _get_json(http, f"{base}/{DATA_DIR}/{table}.json"))
            for table in _select_tables(schema, tables)
        }
    finally:
        if owns_client:
            http.close()

    logger.info("Fetched %d tables from %s", len(data), base)
    return Database(schema=schema, data=data)


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SeedLoadError(f"Cannot read {path}: {e}") from e


def _get_json(client: httpx.Client, url: str) -> Any:
    try:
        response = client.get(url)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as e:
        raise SeedLoadError(f"{e.response.status_code}: {e.response.reason_phrase} ({url})") from e
    except (httpx.HTTPError, json.JSONDecodeError) as e:
        raise SeedLoadError(f"Cannot fetch {url}: {e}") from e


# =============================================================================
# SeedSource implementations
# =============================================================================


class JsonDirectorySeedSource:
    """SeedSource reading a dump from a local directory."""

    def __init__(self, path: str | Path, tables: Iterable[str] | None = None) -> None:
        self._path = Path(path)
        self._tables = list(tables) if tables is not None else None

    def load(self) -> Database:
        return load_database_from_directory(self._path, self._tables)


class HttpSeedSource:
    """SeedSource fetching a dump over HTTP."""

    def __init__(
        self,
        base_url: str = CHINOOK_BASE_URL,
        tables: Iterable[str] | None = None,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url
        self._tables = list(tables) if tables is not None else None
        self._client = client
        self._timeout = timeout

    def load(self) -> Database:
        return fetch_database(self._base_url, self._tables, client=self._client, timeout=self._timeout)


def seed_source_from_config(config: SeedConfig) -> JsonDirectorySeedSource | HttpSeedSource | None:
    """Pick the seed source a SeedConfig describes.

    A directory wins over a URL. Returns None when neither is set.
    """
    if config.source_dir is not None:
        return JsonDirectorySeedSource(config.source_dir)
    if config.source_url is not None:
        return HttpSeedSource(config.source_url, timeout=config.request_timeout_seconds)
    return None
