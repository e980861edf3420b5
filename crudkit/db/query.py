"""MongoDB-style filter evaluation and building.

Generated operations describe row filters as MongoDB-style dicts
(``{"name": "Foam"}``, ``{"$or": [{"name": {"$like": "%oa%"}}]}``). Data
layers translate them to their own query language; ``QueryEngine`` evaluates
them directly against plain dict rows for in-process backends.
"""

import re
from typing import Any, Dict, Optional


def like_to_regex(pattern: str) -> str:
    """Translate an SQL ``LIKE`` pattern into an anchored regular expression."""
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return "^" + "".join(parts) + "$"


class QueryEngine:
    """MongoDB-style filter evaluator for dict rows."""

    @staticmethod
    def get_field_value(document: Dict[str, Any], field: str) -> Any:
        """Get a field value from a document, supporting dot notation.

        Args:
            document: Document to extract value from
            field: Field name, supports dot notation for nested fields

        Returns:
            Field value or None if not found
        """
        if not field:
            return None
        if "." not in field:
            return document.get(field)
        current: Any = document
        for key in field.split("."):
            if isinstance(current, dict) and key in current:
                current = current[key]
            elif isinstance(current, list):
                try:
                    idx = int(key)
                except ValueError:
                    return None
                if 0 <= idx < len(current):
                    current = current[idx]
                else:
                    return None
            else:
                return None
        return current

    @staticmethod
    def match(document: Dict[str, Any], query: Optional[Dict[str, Any]]) -> bool:
        """Check if a document matches a filter.

        Args:
            document: Document to check
            query: Filter conditions

        Returns:
            True if document matches, False otherwise
        """
        if not query:
            return True
        for key, condition in query.items():
            if key == QueryOperator.AND:
                if not all(QueryEngine.match(document, sub) for sub in condition or []):
                    return False
            elif key == QueryOperator.OR:
                if not any(QueryEngine.match(document, sub) for sub in condition or []):
                    return False
            elif key == QueryOperator.NOT:
                if QueryEngine.match(document, condition):
                    return False
            else:
                value = QueryEngine.get_field_value(document, key)
                if not QueryEngine._match_value(value, condition):
                    return False
        return True

    @staticmethod
    def _match_value(value: Any, condition: Any) -> bool:
        if not isinstance(condition, dict):
            if isinstance(value, bool) and isinstance(condition, str):
                return condition.lower() == ("true" if value else "false")
            if isinstance(value, (int, float)) and isinstance(condition, str):
                # filters decoded from query strings arrive as text
                return str(value) == condition
            return value == condition  # type: ignore[no-any-return]

        for op, operand in condition.items():
            if op == QueryOperator.EQ:
                if value != operand:
                    return False
            elif op == QueryOperator.NE:
                if value == operand:
                    return False
            elif op == QueryOperator.GT:
                if not (value is not None and value > operand):
                    return False
            elif op == QueryOperator.GTE:
                if not (value is not None and value >= operand):
                    return False
            elif op == QueryOperator.LT:
                if not (value is not None and value < operand):
                    return False
            elif op == QueryOperator.LTE:
                if not (value is not None and value <= operand):
                    return False
            elif op == QueryOperator.IN:
                try:
                    if value not in operand:
                        return False
                except TypeError:
                    return False
            elif op == QueryOperator.NIN:
                try:
                    if value in operand:
                        return False
                except TypeError:
                    return False
            elif op in (QueryOperator.LIKE, QueryOperator.ILIKE):
                if value is None:
                    return False
                flags = re.IGNORECASE if op == QueryOperator.ILIKE else 0
                if re.match(like_to_regex(str(operand)), str(value), flags) is None:
                    return False
            elif op == QueryOperator.REGEX:
                if value is None or not isinstance(value, str):
                    return False
                try:
                    if re.search(operand, value) is None:
                        return False
                except re.error:
                    return False
            else:
                return False
        return True


class QueryOperator:
    """Supported filter operators."""

    # Comparison operators
    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"

    # Logical operators
    AND = "$and"
    OR = "$or"
    NOT = "$not"

    # String operators
    LIKE = "$like"
    ILIKE = "$iLike"
    REGEX = "$regex"


class QueryBuilder:
    """Builder for constructing MongoDB-style filters programmatically."""

    def __init__(self):
        self._query: Dict[str, Any] = {}

    def or_(self, *conditions: Dict[str, Any]) -> "QueryBuilder":
        """Add OR conditions."""
        self._query.setdefault(QueryOperator.OR, []).extend(conditions)
        return self

    def merge(self, conditions: Optional[Dict[str, Any]]) -> "QueryBuilder":
        """Merge plain field conditions into the filter."""
        for name, condition in (conditions or {}).items():
            self._add_field_condition(name, condition)
        return self

    def build(self) -> Dict[str, Any]:
        """Build the final filter."""
        result = {}
        for key, value in self._query.items():
            if key in (QueryOperator.AND, QueryOperator.OR):
                if value:
                    result[key] = value
            else:
                result[key] = value
        return result

    def _add_field_condition(self, field: str, condition: Any) -> None:
        if field not in self._query:
            self._query[field] = condition
            return
        existing = self._query[field]
        if isinstance(existing, dict) and isinstance(condition, dict):
            existing.update(condition)
        else:
            self._query.setdefault(QueryOperator.AND, []).append({field: condition})

