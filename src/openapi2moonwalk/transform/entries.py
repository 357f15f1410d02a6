"""Small builders shared by the document and operation assemblers.

Target entries are plain dicts. Optional fields are left out rather than
written as ``null``; :func:`compact` enforces that at construction time.
Parameter schemas are merged the same way at path and operation level, via
:func:`add_parameter` and :func:`add_parameter_reference`.
"""

from __future__ import annotations

from typing import Any, Optional

from openapi2moonwalk.nodes import Document, Parameter, RequestBody, enclosing
from openapi2moonwalk.serializer import write_node

_REQUEST_BODY_REF_PREFIX = "#/components/requestBodies/"


def compact(fields: dict[str, Any]) -> dict[str, Any]:
    """Return *fields* without the keys whose value is ``None``."""
    return {key: value for key, value in fields.items() if value is not None}


def empty_parameter_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}}


def add_parameter(schema: dict[str, Any], parameter: Parameter) -> None:
    """Add an inline parameter to a parameter schema.

    The parameter's schema becomes ``properties[name]``; a required parameter
    is also listed in ``required``, which is created on first use.
    """
    schema.setdefault("properties", {})[parameter.name] = _parameter_value_schema(parameter)
    if parameter.required:
        schema.setdefault("required", []).append(parameter.name)


def add_parameter_reference(schema: dict[str, Any], parameter: Parameter) -> None:
    """Pull a ``$ref`` parameter into a parameter schema through ``allOf``."""
    schema.setdefault("allOf", []).append(write_node(parameter))


def _parameter_value_schema(parameter: Parameter) -> Any:
    # Parameters may describe their value with a single-entry content map instead of a schema
    if parameter.schema is None and parameter.content:
        media_type = next(iter(parameter.content.values()))
        return write_node(media_type.schema)
    return write_node(parameter.schema)


def resolve_request_body(body: Optional[RequestBody]) -> Optional[RequestBody]:
    """Follow a ``#/components/requestBodies/...`` reference to its definition.

    Inline bodies, unresolvable references and ``None`` are returned as-is.
    """
    if body is None or body.ref is None or not body.ref.startswith(_REQUEST_BODY_REF_PREFIX):
        return body
    document = enclosing(body, Document)
    if document is None or document.components is None:
        return body
    name = body.ref[len(_REQUEST_BODY_REF_PREFIX):].replace("~1", "/").replace("~0", "~")
    return document.components.request_bodies.get(name, body)


def request_content_types(body: Optional[RequestBody]) -> list[str]:
    """Return the distinct media-type names of a request body, in declaration order."""
    resolved = resolve_request_body(body)
    if resolved is None:
        return []
    return list(resolved.content)
