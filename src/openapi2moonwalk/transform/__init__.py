"""OpenAPI 3.0 to Moonwalk transformation.

:func:`convert` runs the :class:`DocumentAssembler` over an already-read
node tree; :func:`convert_spec` adds the input side (version gate, reader,
validator) for callers holding a loaded document mapping.

Typical usage::

    from openapi2moonwalk.parser import load_spec
    from openapi2moonwalk.transform import convert_spec

    moonwalk = convert_spec(load_spec("petstore.yaml"))
    moonwalk["paths"]["/pets{?limit}"]["requests"]["listPets"]["method"]  # "get"
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from openapi2moonwalk.exceptions import ValidationFailedError
from openapi2moonwalk.models import ConverterConfig
from openapi2moonwalk.nodes import Document
from openapi2moonwalk.parser import read_document, validate_document, validate_openapi_version
from openapi2moonwalk.transform.document import DocumentAssembler
from openapi2moonwalk.transform.operation import OperationAssembler
from openapi2moonwalk.transform.path_keys import PathKeyResolver
from openapi2moonwalk.traversal import traverse

logger = logging.getLogger(__name__)

__all__ = [
    "DocumentAssembler",
    "OperationAssembler",
    "PathKeyResolver",
    "convert",
    "convert_spec",
]


def convert(document: Document, config: Optional[ConverterConfig] = None) -> dict[str, Any]:
    """Convert a node tree into the target document.

    The input is assumed to be valid; no checks are made here.

    Args:
        document: Root node from :func:`~openapi2moonwalk.parser.read_document`.
        config: Conversion settings.

    Returns:
        The finished, JSON-compatible target document.
    """
    assembler = DocumentAssembler(config)
    traverse(document, assembler)
    return assembler.document


def convert_spec(raw: dict[str, Any], config: Optional[ConverterConfig] = None) -> dict[str, Any]:
    """Check, read, optionally validate, and convert a loaded OpenAPI document.

    Args:
        raw: The document mapping as returned by
            :func:`~openapi2moonwalk.parser.load_spec`.
        config: Conversion settings. ``validate_input=False`` skips the
            structural validation step.

    Returns:
        The target document.

    Raises:
        SpecParseError: If the document is not OpenAPI 3.0 or is malformed.
        ValidationFailedError: If validation finds problems.
        NamingConflictError: See :class:`DocumentAssembler`.
    """
    config = config or ConverterConfig()
    version = validate_openapi_version(raw)
    document = read_document(raw)

    if config.validate_input:
        problems = validate_document(document)
        if problems:
            raise ValidationFailedError(problems)
    else:
        logger.debug("Skipping validation of OpenAPI %s document", version)

    return convert(document, config)
