"""Domain entities for the memory engine.

Exports:
    Schema:
        - DataType: Declared column types
        - ColumnDefinition: Normalized metadata for one column
        - SchemaRegistry: Column metadata for every table

    Database:
        - Database: Schema plus table data
        - Record, TableData: Row and store shapes
        - table_rows: Table lookup that raises TableNotFoundError

    Predicates:
        - PredicateLeaf, PredicateGroup, PredicateNode, Predicate
        - parse_predicate: Build a typed tree from the ORM's list form
        - where, and_, or_, group: Builders

    Query descriptors:
        - JoinDescriptor, OrderBy, SelectColumn
        - QueryPlan: A full query, base table first

    Mutation payloads:
        - ExplicitUpdate, ImplicitUpdate
"""

from memory_engine.domain.entities.database import Database, Record, TableData, table_rows
from memory_engine.domain.entities.mutation import ExplicitUpdate, ImplicitUpdate
from memory_engine.domain.entities.predicate import (
    Predicate,
    PredicateGroup,
    PredicateLeaf,
    PredicateNode,
    and_,
    group,
    or_,
    parse_predicate,
    where,
)
from memory_engine.domain.entities.query import JoinDescriptor, OrderBy, QueryPlan, SelectColumn
from memory_engine.domain.entities.schema import ColumnDefinition, DataType, SchemaRegistry

__all__ = [
    # Schema
    "DataType",
    "ColumnDefinition",
    "SchemaRegistry",
    # Database
    "Database",
    "Record",
    "TableData",
    "table_rows",
    # Predicates
    "Predicate",
    "PredicateGroup",
    "PredicateLeaf",
    "PredicateNode",
    "parse_predicate",
    "where",
    "and_",
    "or_",
    "group",
    # Mutation payloads
    "ExplicitUpdate",
    "ImplicitUpdate",
    # Query descriptors
    "JoinDescriptor",
    "OrderBy",
    "QueryPlan",
    "SelectColumn",
]
