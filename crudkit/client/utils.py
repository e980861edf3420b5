"""Query string encoding for client requests."""

from typing import Any, Iterable, Mapping, Union

from crudkit.core.paths import (
    CHILD_SEPARATOR,
    GROUP_SEPARATOR,
    SEGMENT_SEPARATOR,
    InclusionNode,
    encode,
)

IncludeInput = Union[str, Iterable[Any]]


def get_where_string(where: Mapping[str, Any]) -> str:
    """Encode a where filter as ``key1:value1,key2:value2``.

    Raises:
        TypeError: If ``where`` is not a mapping
    """
    if not isinstance(where, Mapping):
        raise TypeError("Where parameter must be a mapping.")
    return SEGMENT_SEPARATOR.join(f"{key}:{value}" for key, value in where.items())


def get_include_string(include: IncludeInput) -> str:
    """Encode an include argument as an association path.

    ``include`` may be a ready path string, a list of ``InclusionNode`` or a
    list of ``{"model": alias, "include": [alias, ...]}`` dicts.

    Example:
        >>> get_include_string(
        ...     [{"model": "Texture", "include": ["Image", "TextureType"]}]
        ... )
        'Texture.Image:TextureType'

    Raises:
        TypeError: If an entry is neither a node nor a model dict
    """
    if isinstance(include, str):
        return include

    items = list(include)
    if all(isinstance(item, InclusionNode) for item in items):
        return encode(items)

    segments = []
    for item in items:
        if not isinstance(item, Mapping):
            raise TypeError("Include parameter must be a mapping.")
        if not item.get("model"):
            raise TypeError("Include parameter must have a model property.")

        segment = str(item["model"])
        children = item.get("include")
        if children:
            if isinstance(children, str) or not isinstance(children, Iterable):
                raise TypeError("Include parameter must be a list of strings.")
            segment += GROUP_SEPARATOR + CHILD_SEPARATOR.join(children)
        segments.append(segment)

    return SEGMENT_SEPARATOR.join(segments)
