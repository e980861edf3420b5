"""Association path parsing, validation and encoding.

An association path is a compact string naming related models to load
alongside a record::

    path       := segment (',' segment)*
    segment    := alias ('.' subsegment)?
    subsegment := alias (':' alias)*

Top-level segments are sibling associations of the root model. A dotted
segment names one association whose own children are the colon separated
aliases after the dot, so ``Texture.TextureType:Images,MaterialType`` loads
``Texture`` (with its ``TextureType`` and ``Images``) and ``MaterialType``.

Only two levels are expressible. An alias without a dot is never expanded
to its own associations.

Example:
    >>> tree = parse(Material, "Texture.TextureType:Images,MaterialType")
    >>> [node.alias for node in tree]
    ['Texture', 'MaterialType']
    >>> encode(tree)
    'Texture.TextureType:Images,MaterialType'
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from crudkit.exceptions import InvalidAssociationError

from .associations import Association, get_associations

SEGMENT_SEPARATOR = ","
GROUP_SEPARATOR = "."
CHILD_SEPARATOR = ":"


@dataclass(frozen=True)
class InclusionNode:
    """One resolved association in an inclusion tree.

    Attributes:
        alias: Association alias on the parent model
        model: Target model of the association
        children: Resolved associations of ``model`` to load as well
    """

    alias: str
    model: Any
    children: Tuple["InclusionNode", ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation, aliases only."""
        data: Dict[str, Any] = {"model": self.alias}
        if self.children:
            data["include"] = [child.alias for child in self.children]
        return data


def _lookup(model: Any, alias: str) -> Association:
    associations = get_associations(model)
    association = associations.get(alias) if alias else None
    if association is None:
        raise InvalidAssociationError(alias, valid=list(associations.keys()))
    return association


def resolve_one(model: Any, alias: str) -> InclusionNode:
    """Resolve a single association alias without the path grammar.

    Args:
        model: Model owning the association
        alias: Association alias

    Returns:
        Childless ``InclusionNode``

    Raises:
        InvalidAssociationError: If ``alias`` is not a direct association
    """
    association = _lookup(model, alias)
    return InclusionNode(alias=alias, model=association.target)


def parse(model: Any, path: str) -> List[InclusionNode]:
    """Parse and validate an association path against a model.

    Args:
        model: Root model; top-level aliases are looked up here
        path: Association path string

    Returns:
        List of resolved top-level nodes, in path order

    Raises:
        InvalidAssociationError: If any alias is unknown in its scope
    """
    if not isinstance(path, str):
        raise InvalidAssociationError(
            str(path), message="Association path must be a string."
        )

    results: List[InclusionNode] = []
    for segment in path.split(SEGMENT_SEPARATOR):
        alias, grouped, child_part = segment.partition(GROUP_SEPARATOR)
        association = _lookup(model, alias)

        children: Tuple[InclusionNode, ...] = ()
        if grouped:
            children = tuple(
                InclusionNode(
                    alias=name,
                    model=_lookup(association.target, name).target,
                )
                for name in child_part.split(CHILD_SEPARATOR)
            )

        results.append(
            InclusionNode(alias=alias, model=association.target, children=children)
        )

    return results


def encode(tree: Sequence[InclusionNode]) -> str:
    """Encode a resolved inclusion tree into its canonical path string.

    ``parse(model, encode(tree)) == tree`` for every tree produced by
    ``parse``.

    Raises:
        InvalidAssociationError: If the tree nests deeper than two levels
    """
    segments = []
    for node in tree:
        segment = node.alias
        if node.children:
            for child in node.children:
                if child.children:
                    raise InvalidAssociationError(
                        child.alias,
                        message=(
                            f"Association {node.alias}.{child.alias} has nested "
                            "associations, only two levels can be encoded."
                        ),
                    )
            segment += GROUP_SEPARATOR + CHILD_SEPARATOR.join(
                child.alias for child in node.children
            )
        segments.append(segment)
    return SEGMENT_SEPARATOR.join(segments)

