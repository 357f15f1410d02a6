"""Load OpenAPI 3.0 documents from a URL, local file, or stdin.

All I/O of the converter happens here. A source string is dispatched to one
of three readers, the text is decoded as JSON or YAML, and the result must be
a mapping. :func:`validate_openapi_version` then makes sure the document is
an OpenAPI 3.0.x description -- the only dialect the transformation
understands.

The loaded mapping is handed to :func:`~openapi2moonwalk.parser.reader.read_document`
to build the node tree.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from openapi2moonwalk.exceptions import SpecParseError

logger = logging.getLogger(__name__)

_URL_TIMEOUT = 30.0


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin (``-``).

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-`` for stdin.

    Returns:
        The decoded document.

    Raises:
        SpecParseError: If the source cannot be read or decoded.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP, using the response content-type as format hint."""
    logger.debug("Fetching %s", url)
    try:
        response = httpx.get(url, timeout=_URL_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    else:
        hint = ""

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a local ``.json``/``.yaml``/``.yml`` file; other suffixes are sniffed."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Input file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read input file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Input file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}.get(suffix, "")
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Decode *content* as JSON, falling back to YAML.

    JSON is tried first unless the hint says YAML; an explicit JSON hint
    disables the YAML fallback so that syntax errors are reported precisely.

    Raises:
        SpecParseError: If neither decoder accepts the content, or the
            top-level value is not a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        msg = "Failed to parse document as JSON or YAML"
        if json_error is not None:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc


def _require_mapping(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        got = type(value).__name__ if value is not None else "empty document"
        raise SpecParseError(f"Document must be a JSON/YAML object (got {got})")
    return value


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Return the ``openapi`` version string if it is 3.0.x.

    Args:
        spec: The loaded document.

    Returns:
        The version string (e.g. ``"3.0.3"``).

    Raises:
        SpecParseError: For Swagger 2.x, a missing ``openapi`` field, or
            any version outside 3.0.x.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x documents can be converted. "
            "Consider converting with https://converter.swagger.io"
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.0 document?")

    version_str = str(version)
    if version_str.startswith("3.0."):
        return version_str

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only OpenAPI 3.0.x documents can be converted."
    )
