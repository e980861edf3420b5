"""Core association-path and parameter handling for crudkit."""

from .associations import Association, association_names, get_associations, model_name
from .params import ParamsBuilder, decode_key_value_list, is_missing
from .paths import InclusionNode, encode, parse, resolve_one

__all__ = [
    "Association",
    "association_names",
    "get_associations",
    "model_name",
    "ParamsBuilder",
    "decode_key_value_list",
    "is_missing",
    "InclusionNode",
    "encode",
    "parse",
    "resolve_one",
]
