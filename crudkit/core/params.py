"""Fluent request parameter pipeline.

``ParamsBuilder`` reads one input mapping and accumulates one output dict
through a chain of steps. Steps run in call order and a later step may
overwrite a key written by an earlier one.

Example:
    >>> params = {"uuid": "a1", "name": "Foam", "include": "Texture"}
    >>> output = (
    ...     ParamsBuilder(params, ["uuid"])
    ...     .select_fields(["name"], "body")
    ...     .resolve_associations(Material, "include")
    ...     .build()
    ... )
"""

from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from crudkit.exceptions import InvalidAssociationError, MissingParameterError

from .associations import get_associations
from .paths import parse

SkipPredicate = Callable[[], bool]


def is_missing(value: Any) -> bool:
    """Whether a parameter value counts as not provided.

    ``None``, the empty string and numeric zero are missing. Booleans are
    taken as provided.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == 0
    return False


def decode_key_value_list(data: str) -> Dict[str, Optional[str]]:
    """Decode ``k1:v1,k2:v2`` into ``{"k1": "v1", "k2": "v2"}``.

    Everything after the first colon is the value; an item without a colon
    maps to ``None``. Empty items are skipped.
    """
    result: Dict[str, Optional[str]] = {}
    for item in data.split(","):
        key, sep, value = item.partition(":")
        if not key:
            continue
        result[key] = value if sep else None
    return result


class ParamsBuilder:
    """Build an output parameter dict from an input mapping.

    Args:
        params: Input parameters, never modified
        required: Keys that must be present and not falsy

    Raises:
        MissingParameterError: For the first required key that is missing
    """

    def __init__(
        self, params: Optional[Mapping[str, Any]], required: Iterable[str] = ()
    ):
        self.input_params: Mapping[str, Any] = params or {}
        self.output_params: Dict[str, Any] = {}

        for key in required:
            if is_missing(self.input_params.get(key)):
                raise MissingParameterError(key)

    def select_fields(
        self, fields: Iterable[str], destination: Optional[str] = None
    ) -> "ParamsBuilder":
        """Copy the listed fields present in the input to the output.

        Args:
            fields: Allowed field names
            destination: Nest the selected fields under this key instead of
                merging them into the output

        Returns:
            The builder
        """
        selected = {
            key: self.input_params[key] for key in fields if key in self.input_params
        }

        if destination:
            self.output_params[destination] = selected
        else:
            self.output_params.update(selected)
        return self

    def decode_key_value_list(
        self, source: str, destination: str, skip: Optional[SkipPredicate] = None
    ) -> "ParamsBuilder":
        """Decode a ``k:v,...`` input string into a dict at ``destination``.

        A value that is already a mapping is copied unchanged.
        """
        if skip is not None and skip():
            return self

        data = self.input_params.get(source)
        if data is None:
            return self
        if isinstance(data, Mapping):
            self.output_params[destination] = dict(data)
        else:
            self.output_params[destination] = decode_key_value_list(str(data))
        return self

    def resolve_one_association(
        self, model: Any, alias: str, skip: Optional[SkipPredicate] = None
    ) -> "ParamsBuilder":
        """Validate a single association alias and store it as ``include``.

        Raises:
            InvalidAssociationError: If ``alias`` is not a direct association
        """
        if skip is not None and skip():
            return self

        associations = get_associations(model)
        if alias not in associations:
            valid = list(associations.keys())
            raise InvalidAssociationError(
                alias,
                valid=valid,
                message=(
                    f"No association found with name {alias}. "
                    f"Possible associations are: {', '.join(valid)}"
                ),
            )

        self.output_params["include"] = alias
        return self

    def resolve_associations(
        self, model: Any, source: str, skip: Optional[SkipPredicate] = None
    ) -> "ParamsBuilder":
        """Parse the association path at ``source`` into an inclusion tree.

        Raises:
            InvalidAssociationError: If the path names an unknown alias
        """
        if skip is not None and skip():
            return self

        self.output_params[source] = parse(model, self.input_params.get(source))
        return self

    def build(self) -> Dict[str, Any]:
        """Return the accumulated output parameters."""
        return dict(self.output_params)
