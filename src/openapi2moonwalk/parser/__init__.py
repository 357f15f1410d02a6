"""OpenAPI 3.0 input side -- load, read into a node tree, and validate.

Typical usage::

    from openapi2moonwalk.parser import (
        load_spec,
        read_document,
        validate_document,
        validate_openapi_version,
    )

    raw = load_spec("petstore.yaml")
    validate_openapi_version(raw)
    document = read_document(raw)
    problems = validate_document(document)

Sub-modules:

* :mod:`~openapi2moonwalk.parser.loader` -- I/O (URL, file, stdin), JSON/YAML
  decoding and the OpenAPI 3.0 version gate.
* :mod:`~openapi2moonwalk.parser.reader` -- builds the typed node tree.
* :mod:`~openapi2moonwalk.parser.validator` -- structural validation.
* :mod:`~openapi2moonwalk.parser.pointer` -- internal ``$ref`` lookup.
"""

from openapi2moonwalk.parser.loader import load_spec, validate_openapi_version
from openapi2moonwalk.parser.reader import read_document
from openapi2moonwalk.parser.validator import validate_document

__all__ = ["load_spec", "validate_openapi_version", "read_document", "validate_document"]
