"""Node-to-JSON serialization.

:func:`write_node` turns any node back into the plain JSON-compatible value
it was read from. This is the boundary where OpenAPI field mapping is
delegated rather than reimplemented: schemas, parameters, request bodies,
security schemes and the like are emitted exactly as declared, with
``$ref`` pointers and ``x-`` extensions intact.

The result is always a fresh deep copy, so the target document never
aliases the source tree.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

from openapi2moonwalk.nodes import Node


def write_node(node: Optional[Node]) -> Any:
    """Return the JSON-compatible representation of *node* (``None`` for ``None``)."""
    if node is None:
        return None
    return copy.deepcopy(node.raw)
