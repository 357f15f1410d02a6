"""Assemble the target document during a single walk of the source tree.

:class:`DocumentAssembler` is the top-level traversal listener. It creates
the document skeleton when the walk starts, adds a path entry per path item,
merges path-level parameters into the entry's parameter schema, copies
reusable components, and -- at every operation -- decides how many request
variants to build.

Content-type fan-out
--------------------

An operation whose request body declares zero or one media types yields a
single request keyed by its ``operationId`` (or HTTP method). With two or
more media types, one request is built per media type and keyed
``<operationId-or-method>-<sanitized media type>``. Each variant comes from
its own sub-walk over the operation with a fresh
:class:`~openapi2moonwalk.transform.operation.OperationAssembler`.

Context such as "the path entry this parameter belongs to" is derived from
the visited node's parents through the path key resolver, never kept in
mutable "current" fields.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from openapi2moonwalk.exceptions import NamingConflictError
from openapi2moonwalk.models import ConflictPolicy, ConverterConfig, ParameterLocation
from openapi2moonwalk.nodes import (
    Document,
    Node,
    NodeKind,
    Operation,
    Parameter,
    ParameterDefinition,
    PathItem,
    RequestBodyDefinition,
    SchemaDefinition,
    SecurityScheme,
    Server,
    Tag,
)
from openapi2moonwalk.serializer import write_node
from openapi2moonwalk.transform.entries import (
    add_parameter,
    add_parameter_reference,
    compact,
    empty_parameter_schema,
    request_content_types,
)
from openapi2moonwalk.transform.naming import request_key
from openapi2moonwalk.transform.operation import OperationAssembler
from openapi2moonwalk.transform.path_keys import PathKeyResolver
from openapi2moonwalk.traversal import Visitor, traverse

logger = logging.getLogger(__name__)

_SCHEMA_LOCATIONS = frozenset({ParameterLocation.PATH.value, ParameterLocation.QUERY.value})

# Kinds whose content is copied by a parent's handler or by the operation sub-walk.
_HANDLED_ELSEWHERE = frozenset({
    NodeKind.INFO,
    NodeKind.CONTACT,
    NodeKind.LICENSE,
    NodeKind.EXTERNAL_DOCS,
    NodeKind.EXTENSION,
    NodeKind.PATHS,
    NodeKind.REQUEST_BODY,
    NodeKind.MEDIA_TYPE,
    NodeKind.RESPONSES,
    NodeKind.RESPONSE,
    NodeKind.HEADER,
    NodeKind.SCHEMA,
    NodeKind.PROPERTY_SCHEMA,
    NodeKind.ITEMS_SCHEMA,
    NodeKind.ADDITIONAL_PROPERTIES_SCHEMA,
    NodeKind.ALL_OF_SCHEMA,
    NodeKind.ANY_OF_SCHEMA,
    NodeKind.ONE_OF_SCHEMA,
    NodeKind.NOT_SCHEMA,
    NodeKind.XML,
    NodeKind.COMPONENTS,
    NodeKind.SECURITY_REQUIREMENT,
    NodeKind.SERVER_VARIABLE,
    NodeKind.OAUTH_FLOWS,
    NodeKind.OAUTH_FLOW,
})


class DocumentAssembler(Visitor):
    """Top-level listener producing the target document.

    Args:
        config: Conversion settings; defaults to :class:`ConverterConfig()`.

    Attributes:
        document: The target document. Complete once the walk has finished.

    Raises:
        NamingConflictError: When two request variants of one path entry get
            the same key and ``config.on_conflict`` is ``"error"``.
    """

    def __init__(self, config: Optional[ConverterConfig] = None) -> None:
        self.config = config or ConverterConfig()
        self.document: dict[str, Any] = {}
        self._path_keys = PathKeyResolver()

    def unhandled(self, node: Node) -> None:
        if node.kind not in _HANDLED_ELSEWHERE:
            super().unhandled(node)

    # --- Document skeleton ---

    def visit_document(self, node: Document) -> None:
        document: dict[str, Any] = {"openapi": self.config.target_version}
        if node.info is not None:
            document["info"] = write_node(node.info)
        if node.servers is not None:
            document["servers"] = []
        if node.tags is not None:
            document["tags"] = []
        if node.external_docs is not None:
            document["externalDocs"] = write_node(node.external_docs)
        if node.paths is not None:
            document["paths"] = {}
        if node.components is not None:
            document["components"] = {}
        for extension in node.extensions:
            document[extension.name] = copy.deepcopy(extension.value)
        self.document = document

    def visit_server(self, node: Server) -> None:
        # Path and operation servers have no place in the target document
        if isinstance(node.parent, Document):
            self.document["servers"].append(write_node(node))

    def visit_tag(self, node: Tag) -> None:
        self.document["tags"].append(write_node(node))

    # --- Paths ---

    def _path_entry(self, path_item: PathItem) -> dict[str, Any]:
        return self.document["paths"][self._path_keys.resolve(path_item)]

    def visit_path_item(self, node: PathItem) -> None:
        entry = compact({"summary": node.summary, "description": node.description})
        if node.parameters:
            entry["parameterSchema"] = empty_parameter_schema()
        self.document["paths"][self._path_keys.resolve(node)] = entry

    def visit_parameter(self, node: Parameter) -> None:
        # Operation parameters belong to the operation sub-walks
        if not isinstance(node.parent, PathItem):
            return
        schema = self._path_entry(node.parent)["parameterSchema"]
        if node.is_ref:
            add_parameter_reference(schema, node)
        elif node.location in _SCHEMA_LOCATIONS:
            add_parameter(schema, node)
        else:
            logger.debug("Ignoring %s parameter '%s' at %s", node.location, node.name, node.pointer)

    def visit_operation(self, node: Operation) -> None:
        path_item = node.parent
        if not isinstance(path_item, PathItem):
            logger.debug("Operation at %s is not inside a path item", node.pointer)
            return
        requests = self._path_entry(path_item).setdefault("requests", {})

        content_types = request_content_types(node.request_body)
        if len(content_types) <= 1:
            content_type = content_types[0] if content_types else None
            variants = [(request_key(node.operation_id, node.method), content_type)]
        else:
            variants = [
                (request_key(node.operation_id, node.method, content_type), content_type)
                for content_type in content_types
            ]

        for key, content_type in variants:
            assembler = OperationAssembler(content_type, collect_security=self.config.collect_security)
            traverse(node, assembler)
            self._insert_request(requests, key, assembler.request, path_item)

    def _insert_request(
        self,
        requests: dict[str, Any],
        key: str,
        request: dict[str, Any],
        path_item: PathItem,
    ) -> None:
        if key in requests:
            message = (
                f"Request key '{key}' is produced twice for path '{path_item.path}'"
            )
            if self.config.on_conflict == ConflictPolicy.ERROR:
                raise NamingConflictError(message)
            logger.warning("%s; keeping the later request", message)
        requests[key] = request

    # --- Components ---

    def _components_section(self, name: str) -> dict[str, Any]:
        return self.document.setdefault("components", {}).setdefault(name, {})

    def visit_schema_definition(self, node: SchemaDefinition) -> None:
        self._components_section("schemas")[node.name] = write_node(node)

    def visit_parameter_definition(self, node: ParameterDefinition) -> None:
        if node.is_ref:
            value = write_node(node)
        else:
            value = empty_parameter_schema()
            add_parameter(value, node)
        self._components_section("parameters")[node.definition_name] = value

    def visit_request_body_definition(self, node: RequestBodyDefinition) -> None:
        self._components_section("requestBodies")[node.name] = write_node(node)

    def visit_security_scheme(self, node: SecurityScheme) -> None:
        self._components_section("securitySchemes")[node.name] = write_node(node)
