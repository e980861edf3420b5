"""Data layer contracts consumed by generated operations.

crudkit never talks to a database directly. A model object (an ORM class,
a repository, or ``MemoryModel``) provides the async calls below and a
read-only ``associations`` registry; rows returned by it provide
``update``/``destroy`` and a way to read their values.

Query dicts passed to ``find_all``/``find_one`` may contain:
    - where: MongoDB-style filter dict
    - include: list of ``InclusionNode`` (or a bare association alias)
    - limit: maximum number of rows
    - offset: number of rows to skip
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class Row(Protocol):
    """A persisted record."""

    async def update(self, fields: Dict[str, Any]) -> "Row":
        """Apply field values and persist them."""
        ...

    async def destroy(self) -> None:
        """Delete the record."""
        ...


@runtime_checkable
class EntityModel(Protocol):
    """A persisted entity type."""

    name: str
    associations: Mapping[str, Any]

    async def count(self) -> int:
        """Total number of rows."""
        ...

    async def find_all(self, query: Dict[str, Any]) -> List[Row]:
        """Rows matching a query."""
        ...

    async def find_one(self, query: Dict[str, Any]) -> Optional[Row]:
        """First row matching a query, or None."""
        ...

    async def create(self, fields: Dict[str, Any]) -> Row:
        """Persist a new row."""
        ...


def row_to_dict(row: Any) -> Dict[str, Any]:
    """Plain dict view of a row, including loaded associations.

    Supports rows exposing ``to_dict()``, Sequelize-style ``data_values``,
    pydantic models and plain mappings.
    """
    if row is None:
        return {}
    if isinstance(row, Mapping):
        return dict(row)
    if hasattr(row, "to_dict"):
        return row.to_dict()
    if hasattr(row, "data_values"):
        return dict(row.data_values)
    if hasattr(row, "model_dump"):
        return row.model_dump()
    return dict(vars(row))
