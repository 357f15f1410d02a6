"""Assemble one request entry from a sub-walk rooted at an operation.

The document assembler runs one :class:`OperationAssembler` per request
variant of an operation. Each instance is bound to a single request-body
content type (or ``None``) and sees only the operation's own subtree, so the
finished :attr:`OperationAssembler.request` can be inserted into the target
document as a complete value.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from openapi2moonwalk.models import ParameterLocation
from openapi2moonwalk.nodes import (
    Extension,
    ExternalDocumentation,
    Header,
    MediaType,
    Operation,
    Parameter,
    RequestBody,
    Response,
    Responses,
    SecurityRequirement,
)
from openapi2moonwalk.serializer import write_node
from openapi2moonwalk.transform.entries import (
    add_parameter,
    add_parameter_reference,
    compact,
    empty_parameter_schema,
    resolve_request_body,
)
from openapi2moonwalk.transform.naming import (
    response_name,
    response_variant_key,
    status_code_or_default,
)
from openapi2moonwalk.traversal import Visitor

logger = logging.getLogger(__name__)

_SCHEMA_LOCATIONS = frozenset({ParameterLocation.PATH.value, ParameterLocation.QUERY.value})


class OperationAssembler(Visitor):
    """Build the request entry for one (operation, content type) pair.

    Args:
        content_type: The request-body media type this variant carries, or
            ``None`` when the operation has no body or a single variant
            without one.
        collect_security: Gather every security requirement into a list
            instead of keeping the last one.

    Example::

        assembler = OperationAssembler("application/json")
        traverse(operation, assembler)
        assembler.request["contentType"]  # "application/json"
    """

    def __init__(self, content_type: Optional[str], collect_security: bool = False) -> None:
        self.content_type = content_type
        self.collect_security = collect_security
        self.request: dict[str, Any] = {}

    def visit_operation(self, node: Operation) -> None:
        # TODO: decide whether data recorded ahead of the operation (extensions) should be merged in
        if self.request:
            logger.debug(
                "Discarding %s recorded before operation %s",
                ", ".join(sorted(self.request)),
                node.pointer,
            )

        has_schema_parameters = any(p.location in _SCHEMA_LOCATIONS for p in node.parameters)
        self.request = compact({
            "description": node.description or None,
            "summary": node.summary or None,
            "method": node.method,
            "tags": list(node.tags) or None,
            "parameterSchema": empty_parameter_schema() if has_schema_parameters else None,
            "contentType": self.content_type,
            "responses": {},
        })

    def visit_parameter(self, node: Parameter) -> None:
        if node.is_ref:
            add_parameter_reference(self._parameter_schema(), node)
        elif node.location in _SCHEMA_LOCATIONS:
            add_parameter(self._parameter_schema(), node)
        else:
            logger.debug("Ignoring %s parameter '%s' at %s", node.location, node.name, node.pointer)

    def _parameter_schema(self) -> dict[str, Any]:
        # Only $ref parameters can get here without the skeleton in place
        if "parameterSchema" not in self.request:
            self.request["parameterSchema"] = empty_parameter_schema()
        return self.request["parameterSchema"]

    def visit_request_body(self, node: RequestBody) -> None:
        if self.content_type is None:
            return
        body = resolve_request_body(node)
        media_type = body.content.get(self.content_type) if body is not None else None
        if media_type is not None and media_type.schema is not None:
            self.request["contentSchema"] = write_node(media_type.schema)

    def visit_response(self, node: Response) -> None:
        status_code = status_code_or_default(node.status_code)
        base = response_name(node.status_code)
        media_types = node.media_types()
        responses = self.request["responses"]

        if len(media_types) <= 1:
            entry = compact({"statusCode": status_code, "description": node.description})
            if len(media_types) == 1:
                entry.update(_content_fields(media_types[0]))
            responses[base] = entry

        # Every media type also gets its own type-qualified entry, even when there is only one
        for media_type in media_types:
            responses[response_variant_key(base, media_type.name)] = compact({
                "statusCode": status_code,
                "description": node.description,
                **_content_fields(media_type),
            })

    def visit_extension(self, node: Extension) -> None:
        self.request[node.name] = node.value

    def visit_security_requirement(self, node: SecurityRequirement) -> None:
        value = write_node(node)
        if self.collect_security:
            self.request.setdefault("security", []).append(value)
            return
        if "security" in self.request:
            logger.warning(
                "Operation at %s declares several security requirements; keeping only the last",
                node.parent.pointer if node.parent is not None else "?",
            )
        self.request["security"] = value

    def visit_external_docs(self, node: ExternalDocumentation) -> None:
        self.request["externalDocumentation"] = write_node(node)

    # Handled elsewhere: media types in visit_request_body / visit_response,
    # responses one by one in visit_response.

    def visit_media_type(self, node: MediaType) -> None:
        pass

    def visit_responses(self, node: Responses) -> None:
        pass

    def visit_header(self, node: Header) -> None:
        # Response headers have no target representation yet
        pass


def _content_fields(media_type: MediaType) -> dict[str, Any]:
    return compact({
        "contentType": media_type.name,
        "contentSchema": write_node(media_type.schema),
    })
