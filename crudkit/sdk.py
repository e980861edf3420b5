"""Client SDK bundles.

``build_sdk`` serializes the client operation sets of a group of
controllers into one JSON file. ``load_sdk`` turns such a bundle back into
ready-to-use ``CrudAPI`` instances pointed at a server URL.

Bundle format::

    {"apis": [{"materials": {"server_url": ..., "endpoint": ...,
                             "pk_name": ..., "options": {...}}}]}

Example:
    >>> build_sdk("sdk.json", "http://localhost:8000", {
    ...     "materials": materials_controller,
    ...     "textures": textures_controller,
    ... })
    >>> api = load_sdk("sdk.json", "https://api.example.com")
    >>> await api["materials"].find_all(limit=10)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from crudkit.client import CrudAPI
from crudkit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BundleInput = Union[str, Path, Mapping[str, Any]]


def build_sdk(
    file_path: Union[str, Path],
    server_url: str,
    controllers: Optional[Mapping[str, Any]] = None,
    authorization: Optional[Any] = None,
) -> Dict[str, Any]:
    """Write the client bundle of ``controllers`` to ``file_path``.

    Args:
        file_path: Destination of the JSON bundle
        server_url: Server URL stored in each client
        controllers: Mapping of name to ``RestController``
        authorization: Credential source given to every client

    Returns:
        The bundle that was written
    """
    apis = []
    for name, controller in (controllers or {}).items():
        api = controller.generate_crud_api(server_url, authorization)
        apis.append({name: api.get_constructor_options()})

    bundle = {"apis": apis}
    path = Path(file_path)
    path.write_text(json.dumps(bundle, indent=4), encoding="utf-8")
    logger.info(f"Wrote SDK bundle with {len(apis)} clients to {path}")
    return bundle


def _read_bundle(bundle: BundleInput) -> Mapping[str, Any]:
    if isinstance(bundle, Mapping):
        return bundle
    if isinstance(bundle, Path) or not bundle.lstrip().startswith("{"):
        return json.loads(Path(bundle).read_text(encoding="utf-8"))
    return json.loads(bundle)


def load_sdk(bundle: BundleInput, server_url: str, **kwargs: Any) -> Dict[str, CrudAPI]:
    """Rebuild the clients of a bundle.

    Args:
        bundle: Bundle file path, JSON string or decoded dict
        server_url: Server URL every client is pointed at
        **kwargs: Extra ``CrudAPI`` arguments (transport, timeout)

    Returns:
        Mapping of name to ``CrudAPI``

    Raises:
        ConfigurationError: If no server URL is given
    """
    if not server_url:
        raise ConfigurationError("server_url is required")

    clients: Dict[str, CrudAPI] = {}
    for entry in _read_bundle(bundle).get("apis", []):
        for name, data in entry.items():
            api = CrudAPI.from_json(data, **kwargs)
            api.set_server_url(server_url)
            clients[name] = api
    return clients
