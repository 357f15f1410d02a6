"""Build the typed node tree from a loaded OpenAPI 3.0 document.

:func:`read_document` is the single public entry point. It walks the raw
mapping section by section (``info``, ``servers``, ``paths``,
``components``, ``security``, ``tags``, ``externalDocs``) and produces a
:class:`~openapi2moonwalk.nodes.Document` whose nodes are linked to their
parents and remember the raw fragment and JSON pointer they came from.

References are **not** resolved: a ``$ref`` parameter stays a
:class:`~openapi2moonwalk.nodes.Parameter` with only ``ref`` set, because the
converter copies references through to the target document.

Keys starting with ``x-`` become :class:`~openapi2moonwalk.nodes.Extension`
nodes on the object that declares them.
"""

from __future__ import annotations

from typing import Any, Optional

from openapi2moonwalk.exceptions import SpecParseError
from openapi2moonwalk.models import HTTPMethod
from openapi2moonwalk.nodes import (
    XML,
    AdditionalPropertiesSchema,
    AllOfSchema,
    AnyOfSchema,
    Components,
    Contact,
    Document,
    Extension,
    ExternalDocumentation,
    Header,
    Info,
    ItemsSchema,
    License,
    MediaType,
    Node,
    NotSchema,
    OAuthFlow,
    OAuthFlows,
    OneOfSchema,
    Operation,
    Parameter,
    ParameterDefinition,
    PathItem,
    Paths,
    PropertySchema,
    RequestBody,
    RequestBodyDefinition,
    Response,
    Responses,
    Schema,
    SchemaDefinition,
    SecurityRequirement,
    SecurityScheme,
    Server,
    ServerVariable,
    Tag,
)
from openapi2moonwalk.parser.pointer import escape_segment

_EXTENSION_PREFIX = "x-"

_SUBSCHEMA_LISTS = (
    ("allOf", "all_of", AllOfSchema),
    ("anyOf", "any_of", AnyOfSchema),
    ("oneOf", "one_of", OneOfSchema),
)


def read_document(raw: dict[str, Any]) -> Document:
    """Read a loaded OpenAPI 3.0 mapping into a :class:`~openapi2moonwalk.nodes.Document`.

    Args:
        raw: The document as returned by
            :func:`~openapi2moonwalk.parser.loader.load_spec`.

    Returns:
        The root node of the tree.

    Raises:
        SpecParseError: If a section that must be an object or array has a
            different JSON type.

    Example::

        raw = load_spec("petstore.yaml")
        validate_openapi_version(raw)
        document = read_document(raw)
        document.paths.items["/pets"].get.operation_id  # "listPets"
    """
    data = _mapping(raw, "", "document")
    document = Document(raw=raw, pointer="", openapi=str(data.get("openapi", "")))
    _attach_extensions(document, data)

    if "info" in data:
        document.info = _read_info(data["info"], "/info", document)
    if "servers" in data:
        document.servers = _read_servers(data["servers"], "/servers", document)
    if "paths" in data:
        document.paths = _read_paths(data["paths"], "/paths", document)
    if "components" in data:
        document.components = _read_components(data["components"], "/components", document)
    document.security = _read_security(data.get("security"), "/security", document)
    if "tags" in data:
        document.tags = [
            _read_tag(tag, f"/tags/{i}", document)
            for i, tag in enumerate(_sequence(data["tags"], "/tags", "tags"))
        ]
    if "externalDocs" in data:
        document.external_docs = _read_external_docs(data["externalDocs"], "/externalDocs", document)

    return document


# --- Helpers ---


def _mapping(value: Any, pointer: str, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SpecParseError(
            f"Expected {what} at '{pointer or '/'}' to be an object, got {type(value).__name__}"
        )
    return value


def _sequence(value: Any, pointer: str, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SpecParseError(
            f"Expected {what} at '{pointer}' to be an array, got {type(value).__name__}"
        )
    return value


def _child(pointer: str, key: str) -> str:
    return f"{pointer}/{escape_segment(str(key))}"


def _attach_extensions(node: Node, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if isinstance(key, str) and key.startswith(_EXTENSION_PREFIX):
            node.extensions.append(
                Extension(raw=value, pointer=_child(node.pointer, key), parent=node, name=key, value=value)
            )


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


# --- Document level ---


def _read_info(raw: Any, pointer: str, parent: Node) -> Info:
    data = _mapping(raw, pointer, "info")
    info = Info(
        raw=raw,
        pointer=pointer,
        parent=parent,
        title=data.get("title"),
        version=_optional_str(data.get("version")),
        description=data.get("description"),
        terms_of_service=data.get("termsOfService"),
    )
    _attach_extensions(info, data)

    if "contact" in data:
        contact_data = _mapping(data["contact"], pointer + "/contact", "contact")
        info.contact = Contact(
            raw=data["contact"],
            pointer=pointer + "/contact",
            parent=info,
            name=contact_data.get("name"),
            url=contact_data.get("url"),
            email=contact_data.get("email"),
        )
        _attach_extensions(info.contact, contact_data)
    if "license" in data:
        license_data = _mapping(data["license"], pointer + "/license", "license")
        info.license = License(
            raw=data["license"],
            pointer=pointer + "/license",
            parent=info,
            name=license_data.get("name"),
            url=license_data.get("url"),
        )
        _attach_extensions(info.license, license_data)
    return info


def _read_servers(raw: Any, pointer: str, parent: Node) -> list[Server]:
    servers: list[Server] = []
    for i, item in enumerate(_sequence(raw, pointer, "servers")):
        item_pointer = f"{pointer}/{i}"
        data = _mapping(item, item_pointer, "server")
        server = Server(
            raw=item,
            pointer=item_pointer,
            parent=parent,
            url=data.get("url"),
            description=data.get("description"),
        )
        _attach_extensions(server, data)
        variables_pointer = item_pointer + "/variables"
        for name, value in _mapping(data.get("variables"), variables_pointer, "server variables").items():
            variable = ServerVariable(
                raw=value, pointer=_child(variables_pointer, name), parent=server, name=name
            )
            _attach_extensions(variable, _mapping(value, variable.pointer, "server variable"))
            server.variables[name] = variable
        servers.append(server)
    return servers


def _read_tag(raw: Any, pointer: str, parent: Node) -> Tag:
    data = _mapping(raw, pointer, "tag")
    tag = Tag(
        raw=raw,
        pointer=pointer,
        parent=parent,
        name=data.get("name"),
        description=data.get("description"),
    )
    _attach_extensions(tag, data)
    if "externalDocs" in data:
        tag.external_docs = _read_external_docs(data["externalDocs"], pointer + "/externalDocs", tag)
    return tag


def _read_external_docs(raw: Any, pointer: str, parent: Node) -> ExternalDocumentation:
    data = _mapping(raw, pointer, "externalDocs")
    docs = ExternalDocumentation(
        raw=raw,
        pointer=pointer,
        parent=parent,
        url=data.get("url"),
        description=data.get("description"),
    )
    _attach_extensions(docs, data)
    return docs


def _read_security(raw: Any, pointer: str, parent: Node) -> list[SecurityRequirement]:
    requirements: list[SecurityRequirement] = []
    for i, item in enumerate(_sequence(raw, pointer, "security")):
        item_pointer = f"{pointer}/{i}"
        data = _mapping(item, item_pointer, "security requirement")
        requirements.append(
            SecurityRequirement(
                raw=item,
                pointer=item_pointer,
                parent=parent,
                requirements={name: list(scopes or []) for name, scopes in data.items()},
            )
        )
    return requirements


# --- Schemas ---


def _read_schema(raw: Any, pointer: str, parent: Node, cls: type = Schema, **fields: Any) -> Schema:
    data = _mapping(raw, pointer, "schema")
    schema = cls(raw=raw, pointer=pointer, parent=parent, ref=data.get("$ref"), **fields)
    _attach_extensions(schema, data)

    properties_pointer = pointer + "/properties"
    for name, value in _mapping(data.get("properties"), properties_pointer, "properties").items():
        schema.properties[name] = _read_schema(
            value, _child(properties_pointer, name), schema, PropertySchema, property_name=name
        )

    if "items" in data:
        schema.items = _read_schema(data["items"], pointer + "/items", schema, ItemsSchema)

    # additionalProperties may also be a boolean, which stays in raw
    if isinstance(data.get("additionalProperties"), dict):
        schema.additional_properties = _read_schema(
            data["additionalProperties"],
            pointer + "/additionalProperties",
            schema,
            AdditionalPropertiesSchema,
        )

    for keyword, attr, sub_cls in _SUBSCHEMA_LISTS:
        keyword_pointer = f"{pointer}/{keyword}"
        for i, value in enumerate(_sequence(data.get(keyword), keyword_pointer, keyword)):
            getattr(schema, attr).append(
                _read_schema(value, f"{keyword_pointer}/{i}", schema, sub_cls)
            )

    if "not" in data:
        schema.not_ = _read_schema(data["not"], pointer + "/not", schema, NotSchema)

    if "xml" in data:
        xml_data = _mapping(data["xml"], pointer + "/xml", "xml")
        schema.xml = XML(raw=data["xml"], pointer=pointer + "/xml", parent=schema, name=xml_data.get("name"))
        _attach_extensions(schema.xml, xml_data)

    return schema


def _read_content(raw: Any, pointer: str, parent: Node) -> dict[str, MediaType]:
    content: dict[str, MediaType] = {}
    for name, value in _mapping(raw, pointer, "content").items():
        item_pointer = _child(pointer, name)
        data = _mapping(value, item_pointer, "media type")
        media_type = MediaType(raw=value, pointer=item_pointer, parent=parent, name=name)
        _attach_extensions(media_type, data)
        if "schema" in data:
            media_type.schema = _read_schema(data["schema"], item_pointer + "/schema", media_type)
        content[name] = media_type
    return content


# --- Paths and operations ---


def _read_paths(raw: Any, pointer: str, parent: Node) -> Paths:
    data = _mapping(raw, pointer, "paths")
    paths = Paths(raw=raw, pointer=pointer, parent=parent)
    _attach_extensions(paths, data)
    for path, value in data.items():
        if path.startswith(_EXTENSION_PREFIX):
            continue
        paths.items[path] = _read_path_item(path, value, _child(pointer, path), paths)
    return paths


def _read_path_item(path: str, raw: Any, pointer: str, parent: Node) -> PathItem:
    data = _mapping(raw, pointer, "path item")
    path_item = PathItem(
        raw=raw,
        pointer=pointer,
        parent=parent,
        path=path,
        ref=data.get("$ref"),
        summary=data.get("summary"),
        description=data.get("description"),
    )
    _attach_extensions(path_item, data)

    path_item.parameters = _read_parameters(data.get("parameters"), pointer + "/parameters", path_item)
    if "servers" in data:
        path_item.servers = _read_servers(data["servers"], pointer + "/servers", path_item)

    for method in HTTPMethod:
        if method.value in data:
            operation = _read_operation(
                method.value, data[method.value], f"{pointer}/{method.value}", path_item
            )
            setattr(path_item, method.value, operation)

    return path_item


def _read_parameters(raw: Any, pointer: str, parent: Node) -> list[Parameter]:
    return [
        _read_parameter(item, f"{pointer}/{i}", parent)
        for i, item in enumerate(_sequence(raw, pointer, "parameters"))
    ]


def _read_parameter(raw: Any, pointer: str, parent: Node, cls: type = Parameter, **fields: Any) -> Parameter:
    data = _mapping(raw, pointer, "parameter")
    parameter = cls(
        raw=raw,
        pointer=pointer,
        parent=parent,
        name=data.get("name"),
        location=data.get("in"),
        required=bool(data.get("required", False)),
        ref=data.get("$ref"),
        description=data.get("description"),
        **fields,
    )
    _attach_extensions(parameter, data)
    if "schema" in data:
        parameter.schema = _read_schema(data["schema"], pointer + "/schema", parameter)
    parameter.content = _read_content(data.get("content"), pointer + "/content", parameter)
    return parameter


def _read_operation(method: str, raw: Any, pointer: str, parent: Node) -> Operation:
    data = _mapping(raw, pointer, "operation")
    operation = Operation(
        raw=raw,
        pointer=pointer,
        parent=parent,
        method=method,
        operation_id=data.get("operationId"),
        summary=data.get("summary"),
        description=data.get("description"),
        tags=[str(tag) for tag in _sequence(data.get("tags"), pointer + "/tags", "tags")],
        deprecated=bool(data.get("deprecated", False)),
    )
    _attach_extensions(operation, data)

    if "externalDocs" in data:
        operation.external_docs = _read_external_docs(
            data["externalDocs"], pointer + "/externalDocs", operation
        )
    operation.parameters = _read_parameters(data.get("parameters"), pointer + "/parameters", operation)
    if "requestBody" in data:
        operation.request_body = _read_request_body(
            data["requestBody"], pointer + "/requestBody", operation
        )
    if "responses" in data:
        operation.responses = _read_responses(data["responses"], pointer + "/responses", operation)
    operation.security = _read_security(data.get("security"), pointer + "/security", operation)
    if "servers" in data:
        operation.servers = _read_servers(data["servers"], pointer + "/servers", operation)
    return operation


def _read_request_body(
    raw: Any, pointer: str, parent: Node, cls: type = RequestBody, **fields: Any
) -> RequestBody:
    data = _mapping(raw, pointer, "request body")
    body = cls(
        raw=raw,
        pointer=pointer,
        parent=parent,
        ref=data.get("$ref"),
        description=data.get("description"),
        required=bool(data.get("required", False)),
        **fields,
    )
    _attach_extensions(body, data)
    body.content = _read_content(data.get("content"), pointer + "/content", body)
    return body


def _read_responses(raw: Any, pointer: str, parent: Node) -> Responses:
    data = _mapping(raw, pointer, "responses")
    responses = Responses(raw=raw, pointer=pointer, parent=parent)
    _attach_extensions(responses, data)
    for key, value in data.items():
        code = str(key)
        if code.startswith(_EXTENSION_PREFIX):
            continue
        responses.entries.append(
            _read_response(None if code == "default" else code, value, _child(pointer, code), responses)
        )
    return responses


def _read_response(status_code: Optional[str], raw: Any, pointer: str, parent: Node) -> Response:
    data = _mapping(raw, pointer, "response")
    response = Response(
        raw=raw,
        pointer=pointer,
        parent=parent,
        status_code=status_code,
        ref=data.get("$ref"),
        description=data.get("description"),
    )
    _attach_extensions(response, data)

    headers_pointer = pointer + "/headers"
    for name, value in _mapping(data.get("headers"), headers_pointer, "headers").items():
        header_pointer = _child(headers_pointer, name)
        header_data = _mapping(value, header_pointer, "header")
        header = Header(
            raw=value, pointer=header_pointer, parent=response, name=name, ref=header_data.get("$ref")
        )
        _attach_extensions(header, header_data)
        if "schema" in header_data:
            header.schema = _read_schema(header_data["schema"], header_pointer + "/schema", header)
        response.headers[name] = header

    response.content = _read_content(data.get("content"), pointer + "/content", response)
    return response


# --- Components ---


def _read_components(raw: Any, pointer: str, parent: Node) -> Components:
    data = _mapping(raw, pointer, "components")
    components = Components(raw=raw, pointer=pointer, parent=parent)
    _attach_extensions(components, data)

    section = pointer + "/schemas"
    for name, value in _mapping(data.get("schemas"), section, "schemas").items():
        components.schemas[name] = _read_schema(
            value, _child(section, name), components, SchemaDefinition, name=name
        )

    section = pointer + "/parameters"
    for name, value in _mapping(data.get("parameters"), section, "parameters").items():
        components.parameters[name] = _read_parameter(
            value, _child(section, name), components, ParameterDefinition, definition_name=name
        )

    section = pointer + "/requestBodies"
    for name, value in _mapping(data.get("requestBodies"), section, "requestBodies").items():
        components.request_bodies[name] = _read_request_body(
            value, _child(section, name), components, RequestBodyDefinition, name=name
        )

    section = pointer + "/securitySchemes"
    for name, value in _mapping(data.get("securitySchemes"), section, "securitySchemes").items():
        components.security_schemes[name] = _read_security_scheme(
            name, value, _child(section, name), components
        )

    return components


def _read_security_scheme(name: str, raw: Any, pointer: str, parent: Node) -> SecurityScheme:
    data = _mapping(raw, pointer, "security scheme")
    scheme = SecurityScheme(
        raw=raw, pointer=pointer, parent=parent, name=name, ref=data.get("$ref"), type=data.get("type")
    )
    _attach_extensions(scheme, data)

    if "flows" in data:
        flows_pointer = pointer + "/flows"
        flows_data = _mapping(data["flows"], flows_pointer, "flows")
        flows = OAuthFlows(raw=data["flows"], pointer=flows_pointer, parent=scheme)
        _attach_extensions(flows, flows_data)
        for flow_type, value in flows_data.items():
            if flow_type.startswith(_EXTENSION_PREFIX):
                continue
            flow_pointer = _child(flows_pointer, flow_type)
            flow_data = _mapping(value, flow_pointer, "flow")
            flow = OAuthFlow(
                raw=value,
                pointer=flow_pointer,
                parent=flows,
                flow_type=flow_type,
                scopes=dict(_mapping(flow_data.get("scopes"), flow_pointer + "/scopes", "scopes")),
            )
            _attach_extensions(flow, flow_data)
            flows.flows[flow_type] = flow
        scheme.flows = flows

    return scheme
