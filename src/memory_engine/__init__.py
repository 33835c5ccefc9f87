"""
Memory Engine - In-memory relational query and mutation engine

Emulates database semantics (filtering, joining, grouping, ordering,
pagination, constrained mutation and snapshot transactions) over tables
held entirely in process memory.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
