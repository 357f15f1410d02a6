"""Exception hierarchy for openapi2moonwalk.

All exceptions inherit from :class:`MoonwalkError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`openapi2moonwalk.exit_codes`. The top-level error handler in
:func:`openapi2moonwalk.app.main` catches ``MoonwalkError`` and exits with the
appropriate code, while unexpected exceptions produce a crash log and exit
with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    MoonwalkError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- SpecParseError         (exit 7)
    +-- ValidationFailedError  (exit 7)
    +-- NamingConflictError    (exit 8)
    +-- ConfigError            (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from openapi2moonwalk.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NAMING_CONFLICT,
    EXIT_SPEC_PARSE_ERROR,
)

if TYPE_CHECKING:
    from openapi2moonwalk.nodes import ValidationProblem


class MoonwalkError(Exception):
    """Base exception for all openapi2moonwalk errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`openapi2moonwalk.exit_codes`. The entry point
    catches this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(MoonwalkError):
    """Raised for CLI arguments Typer accepts but that cannot be used, e.g. an unwritable ``--output``."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(MoonwalkError):
    """Raised when the OpenAPI document cannot be loaded or read into a node tree."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ValidationFailedError(MoonwalkError):
    """Raised when the input document has structural validation problems.

    Args:
        problems: The problems reported by
            :func:`~openapi2moonwalk.parser.validator.validate_document`.
    """

    exit_code = EXIT_SPEC_PARSE_ERROR

    def __init__(self, problems: list[ValidationProblem]):
        noun = "problem" if len(problems) == 1 else "problems"
        super().__init__(f"Validation failed on input document ({len(problems)} {noun})")
        self.problems = problems


class NamingConflictError(MoonwalkError):
    """Raised when two request variants of one path entry resolve to the same key.

    This happens when distinct request-body content types sanitize to the
    same suffix (e.g. ``application/json`` and ``Application/JSON``).
    """

    exit_code = EXIT_NAMING_CONFLICT


class ConfigError(MoonwalkError):
    """Raised for configuration problems (invalid project file, bad environment values)."""

    exit_code = EXIT_GENERIC_FAILURE
