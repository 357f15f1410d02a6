"""Structural validation of the node tree before conversion.

The transformation engine assumes well-formed input and performs no checks
of its own. :func:`validate_document` is the gate in front of it: it walks
the tree once and reports the problems that would otherwise produce a
broken target document (missing names, undeclared path template
parameters, dangling references, ...).

Each :class:`~openapi2moonwalk.nodes.ValidationProblem` is attached to the
node it concerns, so later traversals see it as a ``validation_problem``
node, and is also returned in document order.

Problem codes:

========  ==========================================================
DOC-001   document has no ``info`` object
INF-001   ``info.title`` missing
INF-002   ``info.version`` missing
PAR-001   parameter has no ``name``
PAR-002   parameter ``in`` missing or not path/query/header/cookie
PAR-003   path parameter not marked ``required: true``
PATH-001  path template segment not declared as a path parameter
OP-001    ``operationId`` used by more than one operation
RES-001   response has no ``description``
REF-001   internal ``$ref`` does not resolve
========  ==========================================================
"""

from __future__ import annotations

import re
from typing import Any

from openapi2moonwalk.exceptions import SpecParseError
from openapi2moonwalk.models import ParameterLocation
from openapi2moonwalk.nodes import (
    Document,
    Info,
    Node,
    NodeKind,
    Operation,
    Parameter,
    PathItem,
    Response,
    ValidationProblem,
)
from openapi2moonwalk.parser.pointer import resolve_pointer
from openapi2moonwalk.traversal import Visitor, traverse

_TEMPLATE_SEGMENT = re.compile(r"\{([^{}/]+)\}")
_LOCATIONS = frozenset(loc.value for loc in ParameterLocation)


def validate_document(document: Document) -> list[ValidationProblem]:
    """Validate *document* and return every problem found.

    Problems from an earlier run on the same tree are replaced.

    Args:
        document: Root node produced by
            :func:`~openapi2moonwalk.parser.reader.read_document`.

    Returns:
        The problems in traversal order; empty when the document is valid.
    """
    visitor = _ValidationVisitor(document)
    traverse(document, visitor)
    return visitor.problems


class _ValidationVisitor(Visitor):
    def __init__(self, document: Document) -> None:
        self._root: dict[str, Any] = document.raw if isinstance(document.raw, dict) else {}
        self._operation_ids: set[str] = set()
        self.problems: list[ValidationProblem] = []

    def visit(self, node: Node) -> None:
        if node.kind is not NodeKind.VALIDATION_PROBLEM:
            node.problems.clear()
        super().visit(node)

    def _report(self, node: Node, code: str, message: str) -> None:
        problem = ValidationProblem(
            pointer=node.pointer,
            parent=node,
            code=code,
            node_path=node.pointer or "/",
            message=message,
        )
        node.problems.append(problem)
        self.problems.append(problem)

    def _check_ref(self, node: Node) -> None:
        ref = getattr(node, "ref", None)
        if ref is None:
            return
        try:
            resolve_pointer(ref, self._root)
        except SpecParseError as exc:
            self._report(node, "REF-001", str(exc))

    def _resolved_parameter(self, parameter: Parameter) -> dict[str, Any]:
        if not parameter.is_ref:
            return parameter.raw if isinstance(parameter.raw, dict) else {}
        try:
            target = resolve_pointer(parameter.ref, self._root)
        except SpecParseError:
            return {}
        return target if isinstance(target, dict) else {}

    # --- Handlers ---

    def visit_document(self, node: Document) -> None:
        if node.info is None:
            self._report(node, "DOC-001", "Document is missing the required 'info' object")

    def visit_info(self, node: Info) -> None:
        if not node.title:
            self._report(node, "INF-001", "API is missing a title")
        if not node.version:
            self._report(node, "INF-002", "API is missing a version")

    def visit_parameter(self, node: Parameter) -> None:
        if node.is_ref:
            self._check_ref(node)
            return
        if not node.name:
            self._report(node, "PAR-001", "Parameter is missing a name")
        if node.location not in _LOCATIONS:
            self._report(
                node,
                "PAR-002",
                f"Parameter location must be one of path, query, header, cookie (got {node.location!r})",
            )
        elif node.location == ParameterLocation.PATH.value and not node.required:
            self._report(node, "PAR-003", f"Path parameter '{node.name}' must be marked as required")

    visit_parameter_definition = visit_parameter

    def visit_path_item(self, node: PathItem) -> None:
        self._check_ref(node)
        template_names = _TEMPLATE_SEGMENT.findall(node.path)
        if not template_names:
            return
        path_level = self._path_parameter_names(node.parameters)
        for operation in node.operations():
            declared = path_level | self._path_parameter_names(operation.parameters)
            for name in template_names:
                if name not in declared:
                    self._report(
                        node,
                        "PATH-001",
                        f"Path template parameter '{name}' of '{node.path}' is not declared "
                        f"for the {operation.method} operation",
                    )

    def _path_parameter_names(self, parameters: list[Parameter]) -> set[str]:
        names: set[str] = set()
        for parameter in parameters:
            data = self._resolved_parameter(parameter)
            if data.get("in") == ParameterLocation.PATH.value and data.get("name"):
                names.add(str(data["name"]))
        return names

    def visit_operation(self, node: Operation) -> None:
        if node.operation_id is None:
            return
        if node.operation_id in self._operation_ids:
            self._report(node, "OP-001", f"Duplicate operationId '{node.operation_id}'")
        self._operation_ids.add(node.operation_id)

    def visit_response(self, node: Response) -> None:
        if node.ref is not None:
            self._check_ref(node)
        elif node.description is None:
            code = node.status_code or "default"
            self._report(node, "RES-001", f"Response '{code}' is missing a description")

    def _visit_referencing(self, node: Node) -> None:
        self._check_ref(node)

    visit_request_body = _visit_referencing
    visit_request_body_definition = _visit_referencing
    visit_header = _visit_referencing
    visit_security_scheme = _visit_referencing
    visit_schema = _visit_referencing
    visit_schema_definition = _visit_referencing
    visit_property_schema = _visit_referencing
    visit_items_schema = _visit_referencing
    visit_additional_properties_schema = _visit_referencing
    visit_all_of_schema = _visit_referencing
    visit_any_of_schema = _visit_referencing
    visit_one_of_schema = _visit_referencing
    visit_not_schema = _visit_referencing
