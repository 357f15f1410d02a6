"""Path key derivation.

A path key is the URI template identifying one path entry of the target
document: the raw OpenAPI path, followed by a ``{?a,b}`` query expression
when any operation on the path declares query parameters.
"""

from __future__ import annotations

from openapi2moonwalk.models import ParameterLocation
from openapi2moonwalk.nodes import PathItem


class PathKeyResolver:
    """Compute and memoize path keys.

    The cache is keyed by the raw path string and lives on the resolver
    instance, so each conversion starts empty. A path item's operations must
    not change after its key was first resolved.
    """

    def __init__(self) -> None:
        self._keys: dict[str, str] = {}

    def resolve(self, path_item: PathItem) -> str:
        """Return the path key for *path_item*.

        Query parameter names are gathered from the get, put, post, patch and
        delete operations in that order. Duplicates are dropped and the first
        occurrence fixes the position. ``$ref`` parameters and path-level
        parameters do not contribute.

        Example::

            # GET /pets/{id} with query parameters "limit" and "offset"
            resolver.resolve(path_item)  # "/pets/{id}{?limit,offset}"
        """
        key = self._keys.get(path_item.path)
        if key is None:
            key = _build_key(path_item)
            self._keys[path_item.path] = key
        return key


def _build_key(path_item: PathItem) -> str:
    names: dict[str, None] = {}
    for operation in path_item.operations():
        for parameter in operation.parameters:
            if parameter.location == ParameterLocation.QUERY.value and parameter.name:
                names.setdefault(parameter.name, None)

    if not names:
        return path_item.path
    return path_item.path + "{?" + ",".join(names) + "}"
