"""Outbound ports - dependencies on external systems."""

from memory_engine.ports.outbound.seed_source import SeedSource

__all__ = ["SeedSource"]
