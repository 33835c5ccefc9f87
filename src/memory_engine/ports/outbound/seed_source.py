"""Seed Source port - where the initial schema and rows come from.

The engine does not own any persisted format. At startup a seed source
hands it a populated schema and data store; after that the engine only
works in memory.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from memory_engine.domain.entities.database import Database


class SeedSource(Protocol):
    """Protocol for loading a Database at startup."""

    @abstractmethod
    def load(self) -> Database:
        """Load the schema and every table's rows.

        Returns:
            A Database whose data honours the schema.
        """
        ...
