"""Typer application and CLI entry point for openapi2moonwalk.

Commands:

* ``convert SOURCE`` -- load an OpenAPI 3.0 document, validate it, convert
  it and print the Moonwalk document as pretty JSON.
* ``validate SOURCE`` -- only report structural validation problems.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. It installs a Ctrl-C handler, runs the Typer app, and
turns unexpected exceptions into a crash log under the data directory.

See Also:
    :mod:`openapi2moonwalk.config`: Configuration precedence.
    :mod:`openapi2moonwalk.output`: Output formatting initialised in
    :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.logging import RichHandler

from openapi2moonwalk import __version__
from openapi2moonwalk.exceptions import InvalidUsageError, MoonwalkError, ValidationFailedError
from openapi2moonwalk.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from openapi2moonwalk.models import ConflictPolicy
from openapi2moonwalk.output import OutputManager, debug, error, get_output, set_output, success

app = typer.Typer(
    name="openapi2moonwalk",
    help="Convert an OpenAPI v3 API description to Moonwalk.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

_LOGGER_NAME = "openapi2moonwalk"


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"openapi2moonwalk {__version__}")
        raise typer.Exit()


def _configure_logging(output: OutputManager, verbose: bool) -> None:
    """Send library log records to stderr through Rich."""
    logger = logging.getLogger(_LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(
        RichHandler(console=output.stderr_console, show_time=False, show_path=False, markup=False)
    )
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the global :class:`~openapi2moonwalk.output.OutputManager` and logging."""
    output = OutputManager(no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(output, verbose)


def _load_and_convert(source: str, **overrides: Any) -> tuple[dict[str, Any], int]:
    from openapi2moonwalk.config import resolve_config
    from openapi2moonwalk.parser import load_spec
    from openapi2moonwalk.transform import convert_spec

    config = resolve_config(**overrides)
    debug(f"Loading document from {source}")
    raw = load_spec(source)
    return convert_spec(raw, config), config.indent


@app.command("convert")
def convert_command(
    source: str = typer.Argument(..., help="OpenAPI 3.0 file, URL, or '-' for stdin."),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the document to this file instead of stdout."
    ),
    indent: Optional[int] = typer.Option(None, "--indent", min=0, help="JSON indentation."),
    skip_validation: bool = typer.Option(
        False, "--skip-validation", help="Convert without validating the input first."
    ),
    on_conflict: Optional[ConflictPolicy] = typer.Option(
        None, "--on-conflict", help="What to do when two request variants share a key."
    ),
    collect_security: bool = typer.Option(
        False, "--collect-security", help="Keep every security requirement, not just the last."
    ),
    target_version: Optional[str] = typer.Option(
        None, "--target-version", help="Value of the output document's 'openapi' field."
    ),
) -> None:
    """Convert SOURCE and print the Moonwalk document as JSON.

    Example::

        openapi2moonwalk convert petstore.yaml
        openapi2moonwalk convert https://example.com/openapi.json -o api.moonwalk.json
    """
    output = get_output()
    try:
        document, resolved_indent = _load_and_convert(
            source,
            indent=indent,
            validate_input=False if skip_validation else None,
            on_conflict=on_conflict,
            collect_security=True if collect_security else None,
            target_version=target_version,
        )
    except ValidationFailedError as exc:
        error("Validation failed on input document.")
        output.print_problems([problem.to_dict() for problem in exc.problems])
        raise typer.Exit(code=exc.exit_code) from None
    except MoonwalkError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output.set_output_file(output_file)
    try:
        output.print_document(document, indent=resolved_indent)
    except OSError as exc:
        failure = InvalidUsageError(f"Cannot write output file {output_file}: {exc.strerror or exc}")
        error(str(failure))
        raise typer.Exit(code=failure.exit_code) from None
    if output_file:
        success(f"Wrote {output_file}")


@app.command("validate")
def validate_command(
    source: str = typer.Argument(..., help="OpenAPI 3.0 file, URL, or '-' for stdin."),
    table: bool = typer.Option(False, "--table", help="Show problems as a table instead of JSON."),
) -> None:
    """Check SOURCE for structural problems without converting it."""
    from openapi2moonwalk.parser import (
        load_spec,
        read_document,
        validate_document,
        validate_openapi_version,
    )

    output = get_output()
    try:
        raw = load_spec(source)
        validate_openapi_version(raw)
        problems = validate_document(read_document(raw))
    except MoonwalkError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if problems:
        failure = ValidationFailedError(problems)
        error(str(failure))
        output.print_problems([problem.to_dict() for problem in problems], as_json=not table)
        raise typer.Exit(code=failure.exit_code)
    success("No problems found.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback to the data directory and return the log path."""
    from openapi2moonwalk.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now().strftime('%Y%m%d-%H%M%S')}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``openapi2moonwalk`` console script.

    :class:`~openapi2moonwalk.exceptions.MoonwalkError` instances that
    escape a command exit with the error's ``exit_code``. Anything else
    produces a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except MoonwalkError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
