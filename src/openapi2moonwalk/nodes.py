"""Typed node tree for OpenAPI 3.0 documents.

The reader (:mod:`openapi2moonwalk.parser.reader`) turns a loaded document
mapping into a tree of the dataclasses below. Every node knows:

* its :class:`NodeKind` -- the closed set of kinds the traversal engine
  dispatches on (see :mod:`openapi2moonwalk.traversal`);
* its ``parent`` node (``None`` only for the :class:`Document` root);
* the ``raw`` JSON fragment it was read from, which the serializer hands back
  verbatim (``$ref`` pointers and ``x-`` extensions included);
* its JSON ``pointer`` inside the source document, used for validation
  messages.

Nodes are built once and treated as immutable afterwards. The transformation
engine never writes to them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional


class NodeKind(str, enum.Enum):
    """Every node kind the traversal engine can visit."""

    DOCUMENT = "document"
    INFO = "info"
    CONTACT = "contact"
    LICENSE = "license"
    EXTERNAL_DOCS = "external_docs"
    EXTENSION = "extension"
    TAG = "tag"
    SERVER = "server"
    SERVER_VARIABLE = "server_variable"
    PATHS = "paths"
    PATH_ITEM = "path_item"
    PARAMETER = "parameter"
    PARAMETER_DEFINITION = "parameter_definition"
    OPERATION = "operation"
    REQUEST_BODY = "request_body"
    REQUEST_BODY_DEFINITION = "request_body_definition"
    MEDIA_TYPE = "media_type"
    RESPONSES = "responses"
    RESPONSE = "response"
    HEADER = "header"
    SCHEMA = "schema"
    SCHEMA_DEFINITION = "schema_definition"
    PROPERTY_SCHEMA = "property_schema"
    ITEMS_SCHEMA = "items_schema"
    ADDITIONAL_PROPERTIES_SCHEMA = "additional_properties_schema"
    ALL_OF_SCHEMA = "all_of_schema"
    ANY_OF_SCHEMA = "any_of_schema"
    ONE_OF_SCHEMA = "one_of_schema"
    NOT_SCHEMA = "not_schema"
    COMPONENTS = "components"
    SECURITY_SCHEME = "security_scheme"
    SECURITY_REQUIREMENT = "security_requirement"
    OAUTH_FLOWS = "oauth_flows"
    OAUTH_FLOW = "oauth_flow"
    XML = "xml"
    VALIDATION_PROBLEM = "validation_problem"


@dataclass(eq=False)
class Node:
    """Base class for all nodes.

    Attributes:
        raw: The JSON fragment this node was read from.
        pointer: JSON pointer of the fragment inside the source document.
        parent: The enclosing node, ``None`` for the document root.
        extensions: ``x-`` extensions declared directly on this node.
        problems: Validation problems attached to this node.
    """

    kind: ClassVar[NodeKind]

    raw: Any = field(default=None, repr=False)
    pointer: str = ""
    parent: Optional[Node] = field(default=None, repr=False)
    extensions: list[Extension] = field(default_factory=list, repr=False)
    problems: list[ValidationProblem] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Extension(Node):
    kind: ClassVar[NodeKind] = NodeKind.EXTENSION

    name: str = ""
    value: Any = None


@dataclass(eq=False)
class ValidationProblem(Node):
    """A structural problem found by the validator.

    ``parent`` is the offending node; ``node_path`` its JSON pointer.
    """

    kind: ClassVar[NodeKind] = NodeKind.VALIDATION_PROBLEM

    code: str = ""
    node_path: str = ""
    message: str = ""
    severity: str = "high"

    def to_dict(self) -> dict[str, str]:
        """Return the JSON-compatible form printed by the CLI."""
        return {
            "errorCode": self.code,
            "nodePath": self.node_path,
            "message": self.message,
            "severity": self.severity,
        }


# --- Document level ---


@dataclass(eq=False)
class Contact(Node):
    kind: ClassVar[NodeKind] = NodeKind.CONTACT

    name: Optional[str] = None
    url: Optional[str] = None
    email: Optional[str] = None


@dataclass(eq=False)
class License(Node):
    kind: ClassVar[NodeKind] = NodeKind.LICENSE

    name: Optional[str] = None
    url: Optional[str] = None


@dataclass(eq=False)
class Info(Node):
    kind: ClassVar[NodeKind] = NodeKind.INFO

    title: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    terms_of_service: Optional[str] = None
    contact: Optional[Contact] = None
    license: Optional[License] = None


@dataclass(eq=False)
class ExternalDocumentation(Node):
    kind: ClassVar[NodeKind] = NodeKind.EXTERNAL_DOCS

    url: Optional[str] = None
    description: Optional[str] = None


@dataclass(eq=False)
class Tag(Node):
    kind: ClassVar[NodeKind] = NodeKind.TAG

    name: Optional[str] = None
    description: Optional[str] = None
    external_docs: Optional[ExternalDocumentation] = None


@dataclass(eq=False)
class ServerVariable(Node):
    kind: ClassVar[NodeKind] = NodeKind.SERVER_VARIABLE

    name: str = ""


@dataclass(eq=False)
class Server(Node):
    kind: ClassVar[NodeKind] = NodeKind.SERVER

    url: Optional[str] = None
    description: Optional[str] = None
    variables: dict[str, ServerVariable] = field(default_factory=dict)


# --- Schemas ---


@dataclass(eq=False)
class XML(Node):
    kind: ClassVar[NodeKind] = NodeKind.XML

    name: Optional[str] = None


@dataclass(eq=False)
class Schema(Node):
    """A JSON Schema (OpenAPI 3.0 flavour).

    Only the keywords that hold nested schemas are broken out into nodes;
    everything else stays in ``raw``.
    """

    kind: ClassVar[NodeKind] = NodeKind.SCHEMA

    ref: Optional[str] = None
    properties: dict[str, PropertySchema] = field(default_factory=dict)
    items: Optional[ItemsSchema] = None
    additional_properties: Optional[AdditionalPropertiesSchema] = None
    all_of: list[AllOfSchema] = field(default_factory=list)
    any_of: list[AnyOfSchema] = field(default_factory=list)
    one_of: list[OneOfSchema] = field(default_factory=list)
    not_: Optional[NotSchema] = None
    xml: Optional[XML] = None


@dataclass(eq=False)
class SchemaDefinition(Schema):
    kind: ClassVar[NodeKind] = NodeKind.SCHEMA_DEFINITION

    name: str = ""


@dataclass(eq=False)
class PropertySchema(Schema):
    kind: ClassVar[NodeKind] = NodeKind.PROPERTY_SCHEMA

    property_name: str = ""


@dataclass(eq=False)
class ItemsSchema(Schema):
    kind: ClassVar[NodeKind] = NodeKind.ITEMS_SCHEMA


@dataclass(eq=False)
class AdditionalPropertiesSchema(Schema):
    kind: ClassVar[NodeKind] = NodeKind.ADDITIONAL_PROPERTIES_SCHEMA


@dataclass(eq=False)
class AllOfSchema(Schema):
    kind: ClassVar[NodeKind] = NodeKind.ALL_OF_SCHEMA


@dataclass(eq=False)
class AnyOfSchema(Schema):
    kind: ClassVar[NodeKind] = NodeKind.ANY_OF_SCHEMA


@dataclass(eq=False)
class OneOfSchema(Schema):
    kind: ClassVar[NodeKind] = NodeKind.ONE_OF_SCHEMA


@dataclass(eq=False)
class NotSchema(Schema):
    kind: ClassVar[NodeKind] = NodeKind.NOT_SCHEMA


# --- Paths and operations ---


@dataclass(eq=False)
class MediaType(Node):
    kind: ClassVar[NodeKind] = NodeKind.MEDIA_TYPE

    name: str = ""
    schema: Optional[Schema] = None


@dataclass(eq=False)
class Header(Node):
    kind: ClassVar[NodeKind] = NodeKind.HEADER

    name: str = ""
    ref: Optional[str] = None
    schema: Optional[Schema] = None


@dataclass(eq=False)
class Parameter(Node):
    """A parameter, either inline (``name``/``location``/``schema``) or a ``$ref``."""

    kind: ClassVar[NodeKind] = NodeKind.PARAMETER

    name: Optional[str] = None
    location: Optional[str] = None
    required: bool = False
    ref: Optional[str] = None
    description: Optional[str] = None
    schema: Optional[Schema] = None
    content: dict[str, MediaType] = field(default_factory=dict)

    @property
    def is_ref(self) -> bool:
        return self.ref is not None


@dataclass(eq=False)
class ParameterDefinition(Parameter):
    kind: ClassVar[NodeKind] = NodeKind.PARAMETER_DEFINITION

    definition_name: str = ""


@dataclass(eq=False)
class RequestBody(Node):
    kind: ClassVar[NodeKind] = NodeKind.REQUEST_BODY

    ref: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    content: dict[str, MediaType] = field(default_factory=dict)


@dataclass(eq=False)
class RequestBodyDefinition(RequestBody):
    kind: ClassVar[NodeKind] = NodeKind.REQUEST_BODY_DEFINITION

    name: str = ""


@dataclass(eq=False)
class Response(Node):
    """One entry of an operation's ``responses`` map.

    ``status_code`` is ``None`` for the ``default`` response.
    """

    kind: ClassVar[NodeKind] = NodeKind.RESPONSE

    status_code: Optional[str] = None
    ref: Optional[str] = None
    description: Optional[str] = None
    headers: dict[str, Header] = field(default_factory=dict)
    content: dict[str, MediaType] = field(default_factory=dict)

    def media_types(self) -> list[MediaType]:
        return list(self.content.values())


@dataclass(eq=False)
class Responses(Node):
    kind: ClassVar[NodeKind] = NodeKind.RESPONSES

    entries: list[Response] = field(default_factory=list)


@dataclass(eq=False)
class SecurityRequirement(Node):
    kind: ClassVar[NodeKind] = NodeKind.SECURITY_REQUIREMENT

    requirements: dict[str, list[str]] = field(default_factory=dict)


@dataclass(eq=False)
class Operation(Node):
    kind: ClassVar[NodeKind] = NodeKind.OPERATION

    method: str = ""
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    external_docs: Optional[ExternalDocumentation] = None
    parameters: list[Parameter] = field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: Optional[Responses] = None
    security: list[SecurityRequirement] = field(default_factory=list)
    servers: list[Server] = field(default_factory=list)
    deprecated: bool = False


@dataclass(eq=False)
class PathItem(Node):
    kind: ClassVar[NodeKind] = NodeKind.PATH_ITEM

    path: str = ""
    ref: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: list[Parameter] = field(default_factory=list)
    servers: list[Server] = field(default_factory=list)
    get: Optional[Operation] = None
    put: Optional[Operation] = None
    post: Optional[Operation] = None
    patch: Optional[Operation] = None
    delete: Optional[Operation] = None

    def operations(self) -> list[Operation]:
        """Return the declared operations in get/put/post/patch/delete order."""
        candidates = (self.get, self.put, self.post, self.patch, self.delete)
        return [op for op in candidates if op is not None]


@dataclass(eq=False)
class Paths(Node):
    kind: ClassVar[NodeKind] = NodeKind.PATHS

    items: dict[str, PathItem] = field(default_factory=dict)


# --- Components ---


@dataclass(eq=False)
class OAuthFlow(Node):
    kind: ClassVar[NodeKind] = NodeKind.OAUTH_FLOW

    flow_type: str = ""
    scopes: dict[str, str] = field(default_factory=dict)


@dataclass(eq=False)
class OAuthFlows(Node):
    kind: ClassVar[NodeKind] = NodeKind.OAUTH_FLOWS

    flows: dict[str, OAuthFlow] = field(default_factory=dict)


@dataclass(eq=False)
class SecurityScheme(Node):
    kind: ClassVar[NodeKind] = NodeKind.SECURITY_SCHEME

    name: str = ""
    ref: Optional[str] = None
    type: Optional[str] = None
    flows: Optional[OAuthFlows] = None


@dataclass(eq=False)
class Components(Node):
    kind: ClassVar[NodeKind] = NodeKind.COMPONENTS

    schemas: dict[str, SchemaDefinition] = field(default_factory=dict)
    parameters: dict[str, ParameterDefinition] = field(default_factory=dict)
    request_bodies: dict[str, RequestBodyDefinition] = field(default_factory=dict)
    security_schemes: dict[str, SecurityScheme] = field(default_factory=dict)


@dataclass(eq=False)
class Document(Node):
    """Root of the tree."""

    kind: ClassVar[NodeKind] = NodeKind.DOCUMENT

    openapi: str = ""
    info: Optional[Info] = None
    servers: Optional[list[Server]] = None
    paths: Optional[Paths] = None
    components: Optional[Components] = None
    security: list[SecurityRequirement] = field(default_factory=list)
    tags: Optional[list[Tag]] = None
    external_docs: Optional[ExternalDocumentation] = None


def enclosing(node: Node, node_type: type) -> Optional[Node]:
    """Return the closest ancestor of *node* that is an instance of *node_type*."""
    current = node.parent
    while current is not None:
        if isinstance(current, node_type):
            return current
        current = current.parent
    return None
