"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~openapi2moonwalk.exceptions.MoonwalkError` subclass.
Shell wrappers and CI jobs can inspect the exit code to tell a bad input
document from a naming conflict without parsing stderr.

Example::

    $ openapi2moonwalk convert swagger2.json
    $ echo $?
    7   # EXIT_SPEC_PARSE_ERROR -- not an OpenAPI 3.0 document
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or options."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be loaded, parsed, or validated."""

EXIT_NAMING_CONFLICT = 8
"""Two request variants of one operation were given the same key."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C."""
