"""Association registry access.

A model exposes its relationships through an ``associations`` registry that
maps an alias to an ``Association``. The registry is read-only for crudkit:
it is inspected to validate association paths, never modified.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from crudkit.exceptions import ConfigurationError


@dataclass(frozen=True)
class Association:
    """One named relationship from a model to a target model.

    Attributes:
        as_: Alias under which the relationship is exposed
        target: Target model
        foreign_key: Column holding the reference (used by data layers)
        kind: ``belongs_to``, ``has_one`` or ``has_many``
    """

    as_: str
    target: Any
    foreign_key: Optional[str] = None
    kind: str = "belongs_to"

    @property
    def is_collection(self) -> bool:
        return self.kind == "has_many"


def _coerce(model: Any, entry: Any) -> Association:
    if isinstance(entry, Association):
        association = entry
    elif isinstance(entry, Mapping):
        association = Association(
            as_=entry.get("as") or entry.get("as_"),
            target=entry.get("target") or entry.get("model"),
            foreign_key=entry.get("foreign_key"),
            kind=entry.get("kind", "belongs_to"),
        )
    else:
        association = Association(
            as_=getattr(entry, "as_", None) or getattr(entry, "alias", None),
            target=getattr(entry, "target", None),
            foreign_key=getattr(entry, "foreign_key", None),
            kind=getattr(entry, "kind", "belongs_to"),
        )

    if not association.as_:
        raise ConfigurationError(
            f"Association of {model_name(model)} has no alias: {entry!r}"
        )
    if association.target is None:
        raise ConfigurationError(
            f"Association {association.as_} of {model_name(model)} has no target."
        )
    return association


def get_associations(model: Any) -> Dict[str, Association]:
    """Return the association registry of a model keyed by alias.

    The registry may be a mapping of alias to association or a plain list of
    associations. Entries may be ``Association`` instances, dicts with
    ``as``/``target`` keys or objects with ``as_``/``target`` attributes.

    Args:
        model: Model exposing an ``associations`` attribute

    Returns:
        Ordered dict of alias to ``Association`` (empty if none)

    Raises:
        ConfigurationError: If an entry has no alias or no target
    """
    registry = getattr(model, "associations", None) or {}
    entries = registry.values() if isinstance(registry, Mapping) else registry
    result: Dict[str, Association] = {}
    for entry in entries:
        association = _coerce(model, entry)
        result[association.as_] = association
    return result


def association_names(model: Any) -> List[str]:
    """Aliases of a model's direct associations, in registry order."""
    return list(get_associations(model).keys())


def model_name(model: Any) -> str:
    """Display name of a model."""
    name = getattr(model, "name", None)
    if isinstance(name, str) and name:
        return name
    return getattr(model, "__name__", type(model).__name__)
