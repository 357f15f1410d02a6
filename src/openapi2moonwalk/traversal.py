"""Top-down traversal of the node tree with per-kind visitor dispatch.

:func:`traverse` walks the subtree rooted at a node and calls
:meth:`Visitor.visit` on every node, parents before children, in the
structural order of an OpenAPI 3.0 document::

    document
      info -> contact, license
      servers -> variables
      paths -> path items
        parameters -> schema / content
        get, put, post, patch, delete
          externalDocs, parameters, requestBody -> media types,
          responses -> response -> headers, media types,
          security, servers
      components -> schemas, parameters, requestBodies, securitySchemes
      security, tags, externalDocs

Each node's ``x-`` extensions are visited after its children, followed by
any validation problems attached to it.

Dispatch is closed over :class:`~openapi2moonwalk.nodes.NodeKind`: the child
table below must cover every kind (checked at import), and a visitor may only
define ``visit_<kind>`` methods for kinds that exist (checked when the
subclass is created). Kinds a visitor does not handle are logged at debug
level so that gaps in the mapping stay observable.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from openapi2moonwalk.nodes import (
    Components,
    Document,
    Header,
    Info,
    MediaType,
    Node,
    NodeKind,
    OAuthFlows,
    Operation,
    Parameter,
    PathItem,
    Paths,
    RequestBody,
    Response,
    Responses,
    Schema,
    SecurityScheme,
    Server,
    Tag,
)

logger = logging.getLogger(__name__)

_VISIT_PREFIX = "visit_"
_KIND_VALUES = frozenset(kind.value for kind in NodeKind)


class Visitor:
    """Base class for traversal listeners.

    Subclasses implement ``visit_<kind>`` for the kinds they care about
    (``visit_operation``, ``visit_schema_definition``, ...). Every other
    kind is routed to :meth:`unhandled`.

    Raises:
        TypeError: At class creation, if a ``visit_*`` method names a kind
            that does not exist.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for attr in vars(cls):
            if attr.startswith(_VISIT_PREFIX) and attr[len(_VISIT_PREFIX):] not in _KIND_VALUES:
                raise TypeError(f"{cls.__name__}.{attr} does not match any node kind")

    def visit(self, node: Node) -> None:
        handler = getattr(self, _VISIT_PREFIX + node.kind.value, None)
        if handler is None:
            self.unhandled(node)
        else:
            handler(node)

    def unhandled(self, node: Node) -> None:
        logger.debug(
            "%s: no handler for %s at %s",
            type(self).__name__,
            node.kind.value,
            node.pointer or "/",
        )


def traverse(node: Optional[Node], visitor: Visitor) -> None:
    """Walk the subtree rooted at *node*, visiting every node once.

    Only *node* and its descendants are visited; ancestors and siblings are
    not. ``None`` is accepted and ignored.

    Args:
        node: Root of the walk (a whole document or any node inside one).
        visitor: Listener receiving one :meth:`Visitor.visit` call per node.
    """
    if node is None:
        return
    visitor.visit(node)
    for child in _CHILDREN[node.kind](node):
        traverse(child, visitor)
    for extension in node.extensions:
        traverse(extension, visitor)
    for problem in node.problems:
        visitor.visit(problem)


# --- Child tables ---


def _no_children(node: Node) -> Iterable[Optional[Node]]:
    return ()


def _document_children(node: Document) -> Iterable[Optional[Node]]:
    yield node.info
    yield from node.servers or ()
    yield node.paths
    yield node.components
    yield from node.security
    yield from node.tags or ()
    yield node.external_docs


def _info_children(node: Info) -> Iterable[Optional[Node]]:
    yield node.contact
    yield node.license


def _server_children(node: Server) -> Iterable[Optional[Node]]:
    return node.variables.values()


def _tag_children(node: Tag) -> Iterable[Optional[Node]]:
    yield node.external_docs


def _paths_children(node: Paths) -> Iterable[Optional[Node]]:
    return node.items.values()


def _path_item_children(node: PathItem) -> Iterable[Optional[Node]]:
    yield from node.parameters
    yield from node.operations()
    yield from node.servers


def _operation_children(node: Operation) -> Iterable[Optional[Node]]:
    yield node.external_docs
    yield from node.parameters
    yield node.request_body
    yield node.responses
    yield from node.security
    yield from node.servers


def _parameter_children(node: Parameter) -> Iterable[Optional[Node]]:
    yield node.schema
    yield from node.content.values()


def _request_body_children(node: RequestBody) -> Iterable[Optional[Node]]:
    return node.content.values()


def _media_type_children(node: MediaType) -> Iterable[Optional[Node]]:
    yield node.schema


def _responses_children(node: Responses) -> Iterable[Optional[Node]]:
    return node.entries


def _response_children(node: Response) -> Iterable[Optional[Node]]:
    yield from node.headers.values()
    yield from node.content.values()


def _header_children(node: Header) -> Iterable[Optional[Node]]:
    yield node.schema


def _schema_children(node: Schema) -> Iterable[Optional[Node]]:
    yield from node.properties.values()
    yield node.items
    yield node.additional_properties
    yield from node.all_of
    yield from node.any_of
    yield from node.one_of
    yield node.not_
    yield node.xml


def _components_children(node: Components) -> Iterable[Optional[Node]]:
    yield from node.schemas.values()
    yield from node.parameters.values()
    yield from node.request_bodies.values()
    yield from node.security_schemes.values()


def _security_scheme_children(node: SecurityScheme) -> Iterable[Optional[Node]]:
    yield node.flows


def _oauth_flows_children(node: OAuthFlows) -> Iterable[Optional[Node]]:
    return node.flows.values()


_CHILDREN: dict[NodeKind, Callable[[Any], Iterable[Optional[Node]]]] = {
    NodeKind.DOCUMENT: _document_children,
    NodeKind.INFO: _info_children,
    NodeKind.CONTACT: _no_children,
    NodeKind.LICENSE: _no_children,
    NodeKind.EXTERNAL_DOCS: _no_children,
    NodeKind.EXTENSION: _no_children,
    NodeKind.TAG: _tag_children,
    NodeKind.SERVER: _server_children,
    NodeKind.SERVER_VARIABLE: _no_children,
    NodeKind.PATHS: _paths_children,
    NodeKind.PATH_ITEM: _path_item_children,
    NodeKind.PARAMETER: _parameter_children,
    NodeKind.PARAMETER_DEFINITION: _parameter_children,
    NodeKind.OPERATION: _operation_children,
    NodeKind.REQUEST_BODY: _request_body_children,
    NodeKind.REQUEST_BODY_DEFINITION: _request_body_children,
    NodeKind.MEDIA_TYPE: _media_type_children,
    NodeKind.RESPONSES: _responses_children,
    NodeKind.RESPONSE: _response_children,
    NodeKind.HEADER: _header_children,
    NodeKind.SCHEMA: _schema_children,
    NodeKind.SCHEMA_DEFINITION: _schema_children,
    NodeKind.PROPERTY_SCHEMA: _schema_children,
    NodeKind.ITEMS_SCHEMA: _schema_children,
    NodeKind.ADDITIONAL_PROPERTIES_SCHEMA: _schema_children,
    NodeKind.ALL_OF_SCHEMA: _schema_children,
    NodeKind.ANY_OF_SCHEMA: _schema_children,
    NodeKind.ONE_OF_SCHEMA: _schema_children,
    NodeKind.NOT_SCHEMA: _schema_children,
    NodeKind.COMPONENTS: _components_children,
    NodeKind.SECURITY_SCHEME: _security_scheme_children,
    NodeKind.SECURITY_REQUIREMENT: _no_children,
    NodeKind.OAUTH_FLOWS: _oauth_flows_children,
    NodeKind.OAUTH_FLOW: _no_children,
    NodeKind.XML: _no_children,
    NodeKind.VALIDATION_PROBLEM: _no_children,
}

_missing = set(NodeKind) - set(_CHILDREN)
if _missing:
    raise RuntimeError(f"traversal has no child table for: {sorted(k.value for k in _missing)}")
