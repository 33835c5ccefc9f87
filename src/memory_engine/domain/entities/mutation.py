"""Update payloads the ORM layer sends alongside a predicate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class ExplicitUpdate:
    """Overwrite ``columns[i]`` with ``values[i]`` on every matching row."""

    values: Sequence[Any]


@dataclass(frozen=True)
class ImplicitUpdate:
    """Replace each matching row with the candidate sharing its primary key.

    Attributes:
        primary_keys: Columns identifying a row. Defaults to the table's
            primary key columns when empty.
        objects: Candidate replacement records.
    """

    primary_keys: Sequence[str] = field(default_factory=tuple)
    objects: Sequence[Mapping[str, Any]] = field(default_factory=tuple)
