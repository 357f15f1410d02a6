"""Key naming for request and response variants.

* :func:`response_name` -- base key of a response entry, derived from the
  status code.
* :func:`sanitize` -- identifier-safe suffix for a content type.
* :func:`request_key` / :func:`response_variant_key` -- composite keys used
  when one source object fans out into several target entries.
"""

from __future__ import annotations

import re
from typing import Optional

DEFAULT_STATUS = "default"

# Since status codes are unique within an operation's responses, the
# reason phrase works as a response name.
# https://www.rfc-editor.org/rfc/rfc9110.html#name-status-codes
RESPONSE_NAMES: dict[str, str] = {
    "200": "OK",
    "201": "Created",
    "202": "Accepted",
    "204": "No Content",
    "400": "Bad Request",
    "401": "Unauthorized",
    "403": "Forbidden",
    "404": "Not Found",
    "405": "Method Not Allowed",
}

# A run of non-word characters, unless it ends the string.
_NON_WORD_RUN = re.compile(r"\W+(?!\Z)", re.ASCII)


def status_code_or_default(status_code: Optional[str]) -> str:
    return status_code or DEFAULT_STATUS


def response_name(status_code: Optional[str]) -> str:
    """Return the base response key for *status_code*.

    Known codes map to their RFC 9110 reason phrase; any other code is
    returned unchanged and an absent code becomes ``"default"``.

    Example::

        response_name("404")  # "Not Found"
        response_name("418")  # "418"
        response_name(None)   # "default"
    """
    code = status_code_or_default(status_code)
    return RESPONSE_NAMES.get(code, code)


def sanitize(content_type: str) -> str:
    """Turn a content type into a key suffix.

    Lowercases, then collapses every maximal run of non-word characters into
    a single ``-``. A run at the very end of the string is left untouched.

    Example::

        sanitize("application/vnd.api+json")  # "application-vnd-api-json"
        sanitize("text/plain; charset=utf-8") # "text-plain-charset-utf-8"
        sanitize("text/*")                    # "text-*"
    """
    return _NON_WORD_RUN.sub("-", content_type).lower()


def request_key(operation_id: Optional[str], method: str, content_type: Optional[str] = None) -> str:
    """Return the key of a request entry.

    The base is the operation id, or the HTTP method when there is none. A
    content type is appended (sanitized) only when the operation fans out
    over several request-body content types.
    """
    base = operation_id or method
    if content_type is None:
        return base
    return f"{base}-{sanitize(content_type)}"


def response_variant_key(base: str, media_type: str) -> str:
    return f"{base}-{sanitize(media_type)}"
