"""Predicate evaluation against a single row.

Unlike SQL, evaluation walks the predicate left to right and short-circuits
on the running result:

    - once the result is false, a WHERE / AND clause can never bring the
      row back, so evaluation stops with false
    - once the result is true, an OR clause can never exclude the row, so
      evaluation stops with true

Groups recurse with the running result. A leaf computes its comparison,
inverts it for the NOT chains, and replaces the running result.

Comparisons follow strict equality semantics rather than SQL NULL
propagation: ``= null`` is false and ``<> null`` is true for any non-null
field. Use IS / IS NOT to test for null.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Mapping, Sequence

from memory_engine.domain.entities.predicate import (
    Predicate,
    PredicateGroup,
    PredicateLeaf,
)
from memory_engine.domain.errors import MalformedPredicateError
from memory_engine.domain.value_objects import Operator, classify, strict_equals, try_compare
from memory_engine.domain.value_objects.values import ValueKind

logger = logging.getLogger(__name__)

_Handler = Callable[[Any, Any], bool]


def _ordering(test: Callable[[int], bool]) -> _Handler:
    def handler(field: Any, value: Any) -> bool:
        if value is None:
            return False
        result = try_compare(field, value)
        # a null field is never coerced to 0, so it fails every ordering test
        if result is None or field is None:
            return False
        return test(result)

    return handler


def _between(field: Any, value: Any) -> bool:
    if value is None or not _is_sequence(value) or len(value) != 2:
        return False
    low, high = value
    above = try_compare(field, low)
    below = try_compare(field, high)
    if field is None or above is None or below is None:
        return False
    return above >= 0 and below <= 0


def _in(field: Any, value: Any) -> bool:
    if value is None or not _is_sequence(value):
        return False
    return any(strict_equals(field, candidate) for candidate in value)


def _like(field: Any, value: Any) -> bool:
    if value is None or not isinstance(value, str) or not isinstance(field, str):
        return False
    return like_pattern(value).search(field) is not None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def like_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a LIKE pattern: ``%`` matches any run of characters.

    Every other character, including regex metacharacters, is literal. The
    pattern is unanchored and is searched for anywhere in the field, so
    ``"an"`` matches ``"Banana"``. Matching is case-sensitive.
    """
    return re.compile(".*".join(re.escape(part) for part in pattern.split("%")), re.DOTALL)


_HANDLERS: Mapping[str, _Handler] = {
    Operator.LT.value: _ordering(lambda c: c < 0),
    Operator.LE.value: _ordering(lambda c: c <= 0),
    Operator.GT.value: _ordering(lambda c: c > 0),
    Operator.GE.value: _ordering(lambda c: c >= 0),
    Operator.NE.value: lambda field, value: not strict_equals(field, value),
    Operator.EQ.value: strict_equals,
    Operator.BETWEEN.value: _between,
    Operator.IN.value: _in,
    Operator.IS.value: lambda field, value: classify(field) is ValueKind.NULL,
    Operator.IS_NOT.value: lambda field, value: classify(field) is not ValueKind.NULL,
    Operator.LIKE.value: _like,
}


class PredicateEvaluator:
    """Evaluates predicate trees against rows.

    Evaluation is pure: the row is only read, never modified.

    Args:
        strict: Raise MalformedPredicateError on unknown operators instead
            of treating the comparison as false.
    """

    def __init__(self, strict: bool = False) -> None:
        self._strict = strict

    @property
    def strict(self) -> bool:
        return self._strict

    def evaluate(self, row: Mapping[str, Any], predicate: Predicate | None) -> bool:
        """Return True if the row satisfies the predicate.

        An empty or missing predicate keeps every row.
        """
        if not predicate:
            return True
        return self._evaluate(row, predicate, True)

    def filter(self, rows: Sequence[Mapping[str, Any]], predicate: Predicate | None) -> list:
        """Return the rows satisfying the predicate, in order."""
        if not predicate:
            return list(rows)
        return [row for row in rows if self._evaluate(row, predicate, True)]

    def _evaluate(self, row: Mapping[str, Any], nodes: Predicate, stays: bool) -> bool:
        for node in nodes:
            if not stays and node.chain.is_conjunctive:
                return False
            if stays and node.chain.is_disjunctive:
                return True

            if isinstance(node, PredicateGroup):
                stays = self._evaluate(row, node.nodes, stays)
                continue

            evaluated = self._compare(row, node)
            stays = not evaluated if node.chain.is_negated else evaluated
        return stays

    def _compare(self, row: Mapping[str, Any], leaf: PredicateLeaf) -> bool:
        handler = _HANDLERS.get(leaf.operator.upper())
        if handler is None:
            if self._strict:
                raise MalformedPredicateError(
                    f"Unknown predicate operator: {leaf.operator!r}", operator=leaf.operator
                )
            logger.debug("Unknown predicate operator %r excludes row", leaf.operator)
            return False
        return handler(row.get(leaf.property), leaf.value)
