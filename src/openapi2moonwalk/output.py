"""Output formatting with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- the converted document only, so it can be piped or
  redirected.
* **stderr** -- every diagnostic (status, warnings, errors, validation
  problems).
* **TTY detection** -- JSON on stdout is syntax-highlighted with Rich when
  stdout is an interactive terminal, plain otherwise.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb`` and
  ``--no-color``.

:class:`OutputManager` holds the preferences and Rich consoles. One instance
is created in :func:`~openapi2moonwalk.app.main_callback` and installed with
:func:`set_output`; the module-level helpers (:func:`info`, :func:`error`,
...) delegate to it.
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputManager:
    """Route data to stdout (or a file) and diagnostics to stderr.

    Args:
        no_color: Disable colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Show debug messages on stderr.
        output_file: Write the document to this path instead of stdout.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file
        self._stdout = Console(file=sys.stdout, no_color=self._no_color)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """The Rich console bound to stderr (used by the logging handler)."""
        return self._stderr

    def set_output_file(self, path: Optional[str]) -> None:
        self._output_file = path

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_document(self, data: Any, indent: int = 2) -> None:
        """Write *data* as pretty-printed JSON.

        Goes to the configured output file when there is one; otherwise to
        stdout, highlighted when stdout is an interactive terminal.
        """
        text = json.dumps(data, indent=indent, ensure_ascii=False)
        if self._output_file:
            with open(self._output_file, "w", encoding="utf-8") as f:
                f.write(text + "\n")
            return

        if _is_tty() and not self._no_color:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def print_problems(self, problems: list[dict[str, str]], as_json: bool = True) -> None:
        """Print validation problems to stderr, as JSON or as a Rich table."""
        if as_json or self._no_color:
            print(json.dumps(problems, indent=2, ensure_ascii=False), file=sys.stderr, flush=True)
            return

        table = Table(title="Validation problems", show_header=True, header_style="bold cyan")
        for header in ("Code", "Node", "Message"):
            table.add_column(header)
        for problem in problems:
            table.add_row(problem["errorCode"], problem["nodePath"], problem["message"])
        self._stderr.print(table)

    def info(self, message: str) -> None:
        """Informational message. Suppressed by ``--quiet``."""
        if self._quiet:
            return
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(message)

    def success(self, message: str) -> None:
        """Green success message. Suppressed by ``--quiet``."""
        if self._quiet:
            return
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Yellow warning. Not suppressed by ``--quiet``."""
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Bold-red error. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        """Debug message, shown only with ``--verbose``."""
        if not self._verbose:
            return
        if self._no_color:
            print(f"[debug] {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[dim]\\[debug] {message}[/dim]")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager. Used by the test suite between tests."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
