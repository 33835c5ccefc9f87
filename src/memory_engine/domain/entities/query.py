"""Descriptors the ORM layer uses to describe a query."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from memory_engine.domain.entities.predicate import PredicateNode, parse_predicate
from memory_engine.domain.value_objects import (
    COUNT_ALIAS,
    AggregateFunc,
    SortDirection,
    aggregate_column,
)


@dataclass(frozen=True)
class JoinDescriptor:
    """A table taking part in a query.

    The first descriptor of a query names the base table and leaves the keys
    unset. Every following descriptor joins ``real_name`` on
    ``row[referer_key] == target[reference_key]``, where ``referer_key`` names a
    column already present in the accumulated result.
    """

    real_name: str
    alias: str | None = None
    referer_key: str | None = None
    reference_key: str | None = None

    def __post_init__(self) -> None:
        if self.alias is None:
            object.__setattr__(self, "alias", self.real_name)

    @property
    def is_join(self) -> bool:
        return self.referer_key is not None and self.reference_key is not None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> JoinDescriptor:
        """Accept camelCase (``realName``, ``refererKey``) or snake_case keys."""

        def pick(camel: str, snake: str) -> Any:
            return raw[camel] if camel in raw else raw.get(snake)

        return cls(
            real_name=pick("realName", "real_name"),
            alias=raw.get("alias"),
            referer_key=pick("refererKey", "referer_key"),
            reference_key=pick("referenceKey", "reference_key"),
        )


@dataclass(frozen=True)
class OrderBy:
    """One entry of an ORDER BY list."""

    alias: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> OrderBy:
        return cls(
            alias=raw["alias"],
            direction=SortDirection(str(raw.get("direction", "ASC")).upper()),
        )


@dataclass(frozen=True)
class SelectColumn:
    """One output column of a query.

    Attributes:
        alias: Name of the column in the result row
        table: Alias of the table the column comes from
        column: Source column (defaults to alias)
        aggregate: Aggregate to read from a grouped record, if any
    """

    alias: str
    table: str | None = None
    column: str | None = None
    aggregate: AggregateFunc | None = None

    def __post_init__(self) -> None:
        if self.column is None:
            object.__setattr__(self, "column", self.alias)

    @property
    def source(self) -> str:
        """Column to read from a pipeline row."""
        if self.aggregate is not None:
            return aggregate_column(self.aggregate, self.column)
        return self.alias

    @property
    def is_row_count(self) -> bool:
        return self.alias == COUNT_ALIAS

    @classmethod
    def row_count(cls) -> SelectColumn:
        """The sentinel selection meaning "row count only"."""
        return cls(alias=COUNT_ALIAS)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> SelectColumn:
        aggregate = raw.get("aggregate")
        return cls(
            alias=raw["alias"],
            table=raw.get("table"),
            column=raw.get("column"),
            aggregate=AggregateFunc(str(aggregate).lower()) if aggregate else None,
        )


@dataclass(frozen=True)
class QueryPlan:
    """Everything the query pipeline needs, in the order it is applied.

    Attributes:
        tables: Base table descriptor followed by join descriptors
        predicate: Filter applied to the joined rows
        group_by: Aliases to group by
        order_by: Sort entries, left to right
        offset: Rows to skip
        limit: Maximum rows to return
        select: Output columns, or the single row-count sentinel
    """

    tables: tuple[JoinDescriptor, ...]
    predicate: tuple[PredicateNode, ...] = ()
    group_by: tuple[str, ...] = ()
    order_by: tuple[OrderBy, ...] = ()
    offset: int | None = None
    limit: int | None = None
    select: tuple[SelectColumn, ...] = ()

    def __post_init__(self) -> None:
        if not self.tables:
            raise ValueError("A query needs at least a base table")

    @property
    def base(self) -> JoinDescriptor:
        return self.tables[0]

    @property
    def joins(self) -> tuple[JoinDescriptor, ...]:
        return self.tables[1:]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> QueryPlan:
        """Build a plan from the ORM's serialized query.

        Expected keys: ``from`` (list of table descriptors, base first),
        ``where``, ``group_by`` (list of ``{"alias": ...}`` or strings),
        ``order_by``, ``offset``, ``limit`` and ``select``.
        """
        group_by = [g["alias"] if isinstance(g, Mapping) else g for g in raw.get("group_by") or ()]
        return cls(
            tables=tuple(JoinDescriptor.from_mapping(t) for t in raw.get("from") or ()),
            predicate=parse_predicate(raw.get("where")),
            group_by=tuple(group_by),
            order_by=tuple(OrderBy.from_mapping(o) for o in raw.get("order_by") or ()),
            offset=raw.get("offset"),
            limit=raw.get("limit"),
            select=tuple(SelectColumn.from_mapping(s) for s in raw.get("select") or ()),
        )
