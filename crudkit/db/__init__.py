"""Data layer contracts and the in-memory reference model."""

from .memory import MemoryModel, MemoryRecord
from .model import EntityModel, Row, row_to_dict
from .query import QueryBuilder, QueryEngine, QueryOperator

__all__ = [
    "EntityModel",
    "Row",
    "row_to_dict",
    "MemoryModel",
    "MemoryRecord",
    "QueryBuilder",
    "QueryEngine",
    "QueryOperator",
]
