"""In-process implementation of the model contract.

``MemoryModel`` keeps rows in a dict and evaluates filters with
``QueryEngine``. It supports the association kinds used by the inclusion
tree (``belongs_to``, ``has_one``, ``has_many``), which makes it suitable
for tests, examples and local development.

Example:
    >>> Material = MemoryModel("Material", primary_key="uuid")
    >>> Texture = MemoryModel("Texture", primary_key="uuid")
    >>> Material.has_many(Texture, foreign_key="material_uuid", as_="Textures")
    >>> Texture.belongs_to(Material, foreign_key="material_uuid", as_="Material")
    >>> material = await Material.create({"name": "Foam"})
"""

import asyncio
import copy
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from crudkit.core.associations import Association
from crudkit.core.paths import InclusionNode, resolve_one

from .query import QueryEngine

logger = logging.getLogger(__name__)


def _uuid_key() -> str:
    return str(uuid.uuid4())


class MemoryRecord:
    """A row of a ``MemoryModel``.

    Attributes:
        data_values: Stored column values
        included: Loaded associations keyed by alias
    """

    def __init__(self, model: "MemoryModel", values: Dict[str, Any]):
        self._model = model
        self.data_values: Dict[str, Any] = dict(values)
        self.included: Dict[str, Any] = {}

    @property
    def pk(self) -> Any:
        return self.data_values.get(self._model.primary_key)

    def __getitem__(self, key: str) -> Any:
        return self.to_dict()[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.to_dict().get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.data_values)
        for alias, value in self.included.items():
            if isinstance(value, list):
                data[alias] = [item.to_dict() for item in value]
            elif value is not None:
                data[alias] = value.to_dict()
            else:
                data[alias] = None
        return data

    async def update(self, fields: Dict[str, Any]) -> "MemoryRecord":
        async with self._model._get_lock():
            stored = self._model._rows.get(self.pk)
            if stored is None:
                raise LookupError(f"{self._model.name} {self.pk} no longer exists")
            stored.update(copy.deepcopy(fields))
            self.data_values = copy.deepcopy(stored)
        return self

    async def destroy(self) -> None:
        async with self._model._get_lock():
            self._model._rows.pop(self.pk, None)

    def __repr__(self) -> str:
        return f"<{self._model.name} {self.data_values!r}>"


IncludeSpec = Union[str, InclusionNode]


class MemoryModel:
    """Dict-backed model with association support.

    Args:
        name: Entity type name
        primary_key: Primary key column
        key_factory: Produces keys for rows created without one
        defaults: Column defaults applied on create
    """

    def __init__(
        self,
        name: str,
        primary_key: str = "id",
        key_factory: Optional[Callable[[], Any]] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.primary_key = primary_key
        self.key_factory = key_factory or _uuid_key
        self.defaults = dict(defaults or {})
        self.associations: Dict[str, Association] = {}
        self._rows: Dict[Any, Dict[str, Any]] = {}
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    # ------------------------------------------------------------------
    # Associations
    # ------------------------------------------------------------------

    def associate(
        self, target: "MemoryModel", as_: str, foreign_key: str, kind: str
    ) -> Association:
        """Register an association under ``as_``."""
        association = Association(
            as_=as_, target=target, foreign_key=foreign_key, kind=kind
        )
        self.associations[as_] = association
        return association

    def belongs_to(
        self, target: "MemoryModel", foreign_key: str, as_: Optional[str] = None
    ) -> Association:
        """This model holds ``foreign_key`` referencing ``target``."""
        return self.associate(target, as_ or target.name, foreign_key, "belongs_to")

    def has_one(
        self, target: "MemoryModel", foreign_key: str, as_: Optional[str] = None
    ) -> Association:
        """``target`` holds ``foreign_key`` referencing one row of this model."""
        return self.associate(target, as_ or target.name, foreign_key, "has_one")

    def has_many(
        self, target: "MemoryModel", foreign_key: str, as_: Optional[str] = None
    ) -> Association:
        """``target`` holds ``foreign_key`` referencing rows of this model."""
        return self.associate(target, as_ or target.name, foreign_key, "has_many")

    # ------------------------------------------------------------------
    # Model contract
    # ------------------------------------------------------------------

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        where = (query or {}).get("where")
        return len(self._select(where))

    async def find_all(
        self, query: Optional[Dict[str, Any]] = None
    ) -> List[MemoryRecord]:
        query = query or {}
        rows = self._select(query.get("where"))

        offset = query.get("offset") or 0
        limit = query.get("limit")
        rows = rows[offset:] if limit is None else rows[offset : offset + limit]

        records = [MemoryRecord(self, row) for row in rows]
        include = self._normalize_include(query.get("include"))
        await self._load_includes(records, include)
        return records

    async def find_one(
        self, query: Optional[Dict[str, Any]] = None
    ) -> Optional[MemoryRecord]:
        query = dict(query or {})
        query["limit"] = 1
        records = await self.find_all(query)
        return records[0] if records else None

    async def find_by_pk(self, key: Any) -> Optional[MemoryRecord]:
        return await self.find_one({"where": {self.primary_key: key}})

    async def create(self, fields: Dict[str, Any]) -> MemoryRecord:
        values = copy.deepcopy(self.defaults)
        values.update(copy.deepcopy(fields))
        if values.get(self.primary_key) is None:
            values[self.primary_key] = self.key_factory()

        async with self._get_lock():
            key = values[self.primary_key]
            if key in self._rows:
                raise ValueError(
                    f"{self.name} with {self.primary_key} {key} already exists"
                )
            self._rows[key] = values

        logger.debug(f"Created {self.name} {key}")
        return MemoryRecord(self, copy.deepcopy(values))

    async def truncate(self) -> None:
        async with self._get_lock():
            self._rows.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _select(self, where: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            copy.deepcopy(row)
            for row in self._rows.values()
            if QueryEngine.match(row, where)
        ]

    def _normalize_include(self, include: Any) -> List[InclusionNode]:
        if not include:
            return []
        if isinstance(include, (str, InclusionNode)):
            include = [include]
        return [
            resolve_one(self, item) if isinstance(item, str) else item
            for item in include
        ]

    async def _load_includes(
        self, records: Sequence[MemoryRecord], include: Sequence[InclusionNode]
    ) -> None:
        for node in include:
            association = self.associations[node.alias]
            target: MemoryModel = association.target
            for record in records:
                if association.kind == "belongs_to":
                    reference = record.data_values.get(association.foreign_key)
                    related = target._select({target.primary_key: reference})
                else:
                    related = target._select({association.foreign_key: record.pk})

                related_records = [MemoryRecord(target, row) for row in related]
                await target._load_includes(related_records, node.children)

                if association.kind == "has_many":
                    record.included[node.alias] = related_records
                else:
                    record.included[node.alias] = (
                        related_records[0] if related_records else None
                    )
