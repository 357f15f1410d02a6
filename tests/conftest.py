"""Shared test fixtures for openapi2moonwalk.

Provides the petstore fixture (raw and as a node tree), a builder for small
inline documents, an isolated environment for configuration tests, and the
autouse resets that keep global output and logging state from leaking
between tests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from openapi2moonwalk.config import ENV_VARS
from openapi2moonwalk.nodes import Document
from openapi2moonwalk.output import OutputManager, reset_output, set_output
from openapi2moonwalk.parser import read_document


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams and the
    test finishes, the cached references become stale.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Undo the RichHandler the CLI callback installs on the package logger.

    Without this, records would stop propagating to pytest's ``caplog``
    after the first CLI test.
    """
    logger = logging.getLogger("openapi2moonwalk")
    yield
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Load the raw petstore OpenAPI 3.0 document."""
    with open(FIXTURES_DIR / "petstore.json") as f:
        return json.load(f)


@pytest.fixture
def petstore_document(petstore_raw: dict[str, Any]) -> Document:
    """The petstore document read into a node tree."""
    return read_document(petstore_raw)


@pytest.fixture
def make_raw() -> Callable[..., dict[str, Any]]:
    """Return a builder for minimal OpenAPI 3.0 documents.

    Example::

        raw = make_raw({"/pets": {"get": {...}}}, components={...})
    """

    def _make(paths: dict[str, Any] | None = None, **sections: Any) -> dict[str, Any]:
        raw: dict[str, Any] = {
            "openapi": "3.0.3",
            "info": {"title": "Test API", "version": "1.0.0"},
            "paths": paths if paths is not None else {},
        }
        raw.update(sections)
        return raw

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME into tmp_path, clears every OPENAPI2MOONWALK_*
    environment variable and changes the working directory to tmp_path so
    no project config file from the real checkout is picked up.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless OutputManager for the test."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
