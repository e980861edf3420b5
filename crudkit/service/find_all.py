"""Query assembly for paginated listings."""

import math
from typing import Any, Dict, Mapping, Optional, Tuple

from crudkit.config import CrudKitConfig, get_config
from crudkit.core.params import ParamsBuilder
from crudkit.db.query import QueryBuilder
from crudkit.exceptions import InvalidFilterError, SearchNotConfiguredError

from .options import FindAllOptions


def _positive_int(value: Any) -> Optional[int]:
    """``value`` as an int >= 1, or None when absent, invalid or smaller."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 1 else None


class FindAllRequest:
    """One ``find_all`` call turned into a model query.

    Args:
        model: Model being listed
        params: Request parameters (limit, page, q, where, include)
        options: ``find_all`` options of the operation set
        config: Process configuration for fallback defaults
    """

    def __init__(
        self,
        model: Any,
        params: Mapping[str, Any],
        options: FindAllOptions,
        config: Optional[CrudKitConfig] = None,
    ):
        self.model = model
        self.params = params
        self.options = options
        self.config = config or get_config()

    async def get_result(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Validate the request and build the query.

        Returns:
            ``(query, props)``: the model query (where, include, limit,
            offset) and the pagination props (page, count, pages)

        Raises:
            SearchNotConfiguredError: If ``q`` is sent without search fields
            InvalidFilterError: If ``where`` uses a non-whitelisted field
            InvalidAssociationError: If ``include`` names an unknown alias
        """
        params = (
            ParamsBuilder(self.params)
            .decode_key_value_list(
                "where", "where", skip=lambda: not self.params.get("where")
            )
            .resolve_associations(
                self.model, "include", skip=lambda: not self.params.get("include")
            )
            .build()
        )

        query: Dict[str, Any] = {}
        where = self.get_where_query(params.get("where"))
        if where:
            query["where"] = where
        if params.get("include"):
            query["include"] = params["include"]

        page = self.get_page_param()
        query["limit"] = self.get_limit_param()
        query["offset"] = (page - 1) * query["limit"]

        # The total is not narrowed by q/where.
        count = await self.model.count()
        props = {
            "page": page,
            "count": count,
            "pages": math.ceil(count / query["limit"]),
        }
        return query, props

    def get_search_query(self) -> Optional[Dict[str, Any]]:
        """OR-across-fields substring filter for ``q``."""
        q = self.params.get("q")
        if not q:
            return None

        search_properties = self.options.search_properties
        if not search_properties:
            raise SearchNotConfiguredError()

        return {"$or": [{prop: {"$like": f"%{q}%"}} for prop in search_properties]}

    def get_where_query(self, where: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Search filter merged with the validated ``where`` filter."""
        builder = QueryBuilder()
        search = self.get_search_query()
        if search:
            builder.or_(*search["$or"])

        if where:
            allowed = self.options.where_properties or []
            invalid = [key for key in where if key not in allowed]
            if invalid:
                raise InvalidFilterError(invalid, allowed)
            builder.merge(where)

        return builder.build()

    def get_limit_param(self) -> int:
        return (
            _positive_int(self.params.get("limit"))
            or self.options.default_limit
            or self.config.default_limit
        )

    def get_page_param(self) -> int:
        return (
            _positive_int(self.params.get("page"))
            or self.options.default_page
            or self.config.default_page
        )
