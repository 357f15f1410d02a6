"""Pydantic configuration model and shared enums.

:class:`ConverterConfig` is the single source of truth for conversion
settings. It is built by :func:`~openapi2moonwalk.config.resolve_config`
from CLI flags, environment variables and the project-local
``openapi2moonwalk.json`` file, and handed to
:func:`~openapi2moonwalk.transform.convert`.

The enums name the OpenAPI vocabulary the transformation cares about:
:class:`HTTPMethod` (the five operation slots of a path item) and
:class:`ParameterLocation` (the ``in`` field of a parameter).
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


class HTTPMethod(str, enum.Enum):
    """Operation slots of a path item, in the order they are visited."""

    GET = "get"
    PUT = "put"
    POST = "post"
    PATCH = "patch"
    DELETE = "delete"


class ParameterLocation(str, enum.Enum):
    """Locations where a parameter can appear, per the OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class ConflictPolicy(str, enum.Enum):
    """What to do when two request variants of a path resolve to the same key."""

    ERROR = "error"
    WARN = "warn"


class ConverterConfig(BaseModel):
    """Settings for one conversion run.

    Example::

        ConverterConfig(indent=4, on_conflict="warn")
    """

    model_config = ConfigDict(extra="forbid")

    target_version: str = Field(
        default="4.0.0", description="Value written to the target document's 'openapi' field"
    )
    indent: int = Field(default=2, ge=0, description="JSON indentation of the printed document")
    validate_input: bool = Field(
        default=True, description="Run structural validation before converting"
    )
    on_conflict: ConflictPolicy = Field(
        default=ConflictPolicy.ERROR,
        description="Request key collisions: 'error' aborts, 'warn' keeps the later entry",
    )
    collect_security: bool = Field(
        default=False,
        description="Gather every operation security requirement into a list "
        "instead of keeping only the last one",
    )
