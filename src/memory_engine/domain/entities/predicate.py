"""Predicate tree nodes.

A predicate is an ordered sequence of nodes. Each node is either a leaf
comparison or a nested group, and carries the chain marker that says how it
composes with everything to its left.

The ORM layer sends predicates as plain lists: a dict per leaf
(``{"chain": "AND", "operator": "=", "property": "Color", "value": "Red"}``)
and a nested list per group. parse_predicate() turns that into the typed
tree; a group takes the chain of its first member.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union

from memory_engine.domain.errors import MalformedPredicateError
from memory_engine.domain.value_objects import Chain, Operator


@dataclass(frozen=True)
class PredicateLeaf:
    """A single comparison against one property of a row.

    The operator is kept as the raw token so that operators the evaluator
    does not know about still reach it.
    """

    chain: Chain
    operator: str
    property: str
    value: Any = None

    @classmethod
    def of(
        cls,
        chain: Chain | str,
        property: str,
        operator: Operator | str,
        value: Any = None,
    ) -> PredicateLeaf:
        """Convenience constructor accepting enums or raw tokens."""
        return cls(
            chain=chain if isinstance(chain, Chain) else Chain(chain),
            operator=operator.value if isinstance(operator, Operator) else operator,
            property=property,
            value=value,
        )


@dataclass(frozen=True)
class PredicateGroup:
    """A parenthesized sub-sequence of nodes."""

    chain: Chain
    nodes: tuple[PredicateNode, ...] = field(default_factory=tuple)


PredicateNode = Union[PredicateLeaf, PredicateGroup]
Predicate = Sequence[PredicateNode]


def where(property: str, operator: Operator | str, value: Any = None) -> PredicateLeaf:
    return PredicateLeaf.of(Chain.WHERE, property, operator, value)


def and_(property: str, operator: Operator | str, value: Any = None) -> PredicateLeaf:
    return PredicateLeaf.of(Chain.AND, property, operator, value)


def or_(property: str, operator: Operator | str, value: Any = None) -> PredicateLeaf:
    return PredicateLeaf.of(Chain.OR, property, operator, value)


def group(*nodes: PredicateNode) -> PredicateGroup:
    """Group nodes; the group's chain is its first member's chain."""
    if not nodes:
        raise MalformedPredicateError("A predicate group cannot be empty")
    return PredicateGroup(chain=nodes[0].chain, nodes=tuple(nodes))


def _parse_chain(raw: Any) -> Chain:
    try:
        return raw if isinstance(raw, Chain) else Chain(str(raw).upper())
    except ValueError:
        raise MalformedPredicateError(f"Unknown chain marker: {raw!r}") from None


def _parse_node(raw: Any) -> PredicateNode:
    if isinstance(raw, (PredicateLeaf, PredicateGroup)):
        return raw
    if isinstance(raw, Mapping):
        try:
            return PredicateLeaf(
                chain=_parse_chain(raw["chain"]),
                operator=str(raw["operator"]),
                property=raw["property"],
                value=raw.get("value"),
            )
        except KeyError as e:
            raise MalformedPredicateError(f"Predicate leaf is missing {e}") from None
    if isinstance(raw, (list, tuple)):
        nodes = tuple(_parse_node(item) for item in raw)
        if not nodes:
            raise MalformedPredicateError("A predicate group cannot be empty")
        return PredicateGroup(chain=nodes[0].chain, nodes=nodes)
    raise MalformedPredicateError(f"Cannot interpret predicate node: {raw!r}")


def parse_predicate(raw: Sequence[Any] | None) -> tuple[PredicateNode, ...]:
    """Build a typed predicate from the ORM's list form.

    Args:
        raw: Sequence of leaf mappings / nested sequences, typed nodes, or None.

    Returns:
        Tuple of top-level nodes (empty when raw is None or empty).

    Raises:
        MalformedPredicateError: If a node cannot be interpreted, or the first
            top-level node does not open with WHERE / WHERE NOT.
    """
    if not raw:
        return ()
    nodes = tuple(_parse_node(item) for item in raw)
    if not nodes[0].chain.is_opening:
        raise MalformedPredicateError(
            f"Predicate must start with WHERE or WHERE NOT, got {nodes[0].chain.value}"
        )
    return nodes
