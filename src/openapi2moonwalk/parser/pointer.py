"""Resolve internal ``$ref`` JSON pointers against the raw document.

The converter never inlines references -- ``$ref`` values are copied into
the target document as-is. The validator still needs to know whether each
pointer lands somewhere, which is what :func:`resolve_pointer` answers.

Only **internal** references (``#/...``) are supported; anything else raises
:class:`~openapi2moonwalk.exceptions.SpecParseError`.
"""

from __future__ import annotations

from typing import Any

from openapi2moonwalk.exceptions import SpecParseError


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Return the value *ref* points to inside *root*.

    Handles RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``).

    Args:
        ref: A reference such as ``"#/components/schemas/Pet"``.
        root: The raw document mapping.

    Raises:
        SpecParseError: If the reference is external or any segment is
            missing.

    Example::

        resolve_pointer("#/components/parameters/limit", raw)
        # {"name": "limit", "in": "query", ...}
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )

    return current


def escape_segment(segment: str) -> str:
    """Escape one path segment for use inside a JSON pointer."""
    return segment.replace("~", "~0").replace("/", "~1")
