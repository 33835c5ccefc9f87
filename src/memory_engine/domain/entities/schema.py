"""Schema registry - per-table column metadata.

The ORM layer hands the engine a loose mapping of column metadata using
camelCase keys (``isPrimary``, ``isIdentity`` ...). The registry normalizes
it once into frozen ColumnDefinition objects; nothing mutates column
metadata afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping

from memory_engine.domain.errors import TableNotFoundError


class DataType(Enum):
    """Declared column data types."""

    STRING = "string"
    BOOLEAN = "boolean"
    INT = "int"
    FLOAT = "float"
    DATE = "date"


@dataclass(frozen=True, slots=True)
class ColumnDefinition:
    """Metadata for a single column.

    Attributes:
        table: Table the column belongs to
        field: Column name
        datatype: Declared data type
        is_primary: Part of the primary key
        is_identity: Value is assigned by the engine on insert
        is_nullable: Column accepts null
        is_unique: Part of the composite unique key (defaults to is_primary)
        default_value: Optional zero-argument producer for unsupplied values
    """

    table: str
    field: str
    datatype: DataType = DataType.STRING
    is_primary: bool = False
    is_identity: bool = False
    is_nullable: bool = True
    is_unique: bool | None = None
    default_value: Callable[[], Any] | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.is_unique is None:
            object.__setattr__(self, "is_unique", self.is_primary)

    @property
    def is_key(self) -> bool:
        """Return True if the column takes part in the composite unique key."""
        return self.is_primary or bool(self.is_unique)

    def produce_default(self) -> Any:
        """Value for the column when an insert does not supply one."""
        if self.default_value is None:
            return None
        return self.default_value()

    @classmethod
    def from_mapping(cls, table: str, name: str, raw: Mapping[str, Any]) -> ColumnDefinition:
        """Build a column from the ORM's loose metadata mapping.

        Both camelCase and snake_case keys are accepted. Missing ``table`` and
        ``field`` entries are taken from the registry keys.
        """

        def pick(camel: str, snake: str, default: Any = None) -> Any:
            if camel in raw:
                return raw[camel]
            return raw.get(snake, default)

        datatype = raw.get("datatype") or DataType.STRING
        if not isinstance(datatype, DataType):
            try:
                datatype = DataType(str(datatype).lower())
            except ValueError as e:
                raise ValueError(f"Unknown datatype {datatype!r} for {table}.{name}") from e

        default = pick("defaultValue", "default_value")
        if default is not None and not callable(default):
            constant = default
            default = lambda: constant  # noqa: E731

        return cls(
            table=raw.get("table") or table,
            field=raw.get("field") or name,
            datatype=datatype,
            is_primary=bool(pick("isPrimary", "is_primary", False)),
            is_identity=bool(pick("isIdentity", "is_identity", False)),
            is_nullable=bool(pick("isNullable", "is_nullable", True)),
            is_unique=pick("isUnique", "is_unique"),
            default_value=default,
        )


class SchemaRegistry:
    """Holds normalized column metadata for every table."""

    def __init__(self, tables: Mapping[str, Mapping[str, ColumnDefinition]] | None = None) -> None:
        self._tables: dict[str, Mapping[str, ColumnDefinition]] = {}
        for name, columns in (tables or {}).items():
            self.register(name, columns)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]]) -> SchemaRegistry:
        """Normalize a ``{table: {column: metadata}}`` mapping."""
        registry = cls()
        for table, columns in raw.items():
            registry.register(
                table,
                {
                    name: meta if isinstance(meta, ColumnDefinition)
                    else ColumnDefinition.from_mapping(table, name, meta)
                    for name, meta in columns.items()
                },
            )
        return registry

    def register(self, table: str, columns: Mapping[str, ColumnDefinition]) -> None:
        """Register a table's columns. Re-registering a table is an error."""
        if table in self._tables:
            raise ValueError(f"Table '{table}' is already registered")
        self._tables[table] = MappingProxyType(dict(columns))

    def has_table(self, table: str) -> bool:
        return table in self._tables

    @property
    def tables(self) -> list[str]:
        return list(self._tables)

    def columns(self, table: str) -> Mapping[str, ColumnDefinition]:
        """Read-only column metadata for a table.

        Raises:
            TableNotFoundError: If the table is not registered.
        """
        try:
            return self._tables[table]
        except KeyError:
            raise TableNotFoundError(table) from None

    def unique_key_columns(self, table: str) -> list[str]:
        """Union of primary and unique columns, in declaration order."""
        return [name for name, col in self.columns(table).items() if col.is_key]

    def primary_key_columns(self, table: str) -> list[str]:
        return [name for name, col in self.columns(table).items() if col.is_primary]

    def identity_columns(self, table: str) -> list[str]:
        return [name for name, col in self.columns(table).items() if col.is_identity]

    def __contains__(self, table: object) -> bool:
        return table in self._tables

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)
