"""openapi2moonwalk -- Convert OpenAPI 3.0 descriptions into Moonwalk documents.

The target model groups operations by URI-template path keys
(``/pets/{id}{?limit}``) and describes each request variant -- one per
request-body content type -- with JSON-Schema parameter and content schemas
and named responses (``OK``, ``Not Found-application-json``, ...).

Typical workflow::

    openapi2moonwalk convert petstore.yaml -o petstore.moonwalk.json

or from Python::

    from openapi2moonwalk import convert_spec, load_spec

    moonwalk = convert_spec(load_spec("petstore.yaml"))

Modules:
    app: Typer application and CLI entry point.
    parser: Loading, reading into a node tree, and validation.
    traversal: Node-kind dispatch and the top-down walk.
    transform: The conversion engine.
    config: Configuration precedence resolution.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"

from openapi2moonwalk.parser import load_spec  # noqa: E402
from openapi2moonwalk.transform import convert, convert_spec  # noqa: E402

__all__ = ["__version__", "convert", "convert_spec", "load_spec"]
