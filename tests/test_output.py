"""Tests for the output formatting system.

Covers:
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbose mode debug output
- Document printing to stdout and to a file
- Validation problem rendering
- Global instance management
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from openapi2moonwalk import output as output_module
from openapi2moonwalk.output import (
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)

_PROBLEM = {
    "errorCode": "PAR-001",
    "nodePath": "/paths/~1a/parameters/0",
    "message": "Parameter is missing a name",
    "severity": "high",
}


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("openapi2moonwalk.output._is_tty", lambda: False)


# ------------------------------------------------------------------ #
# NO_COLOR / TERM=dumb detection
# ------------------------------------------------------------------ #


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    def test_document_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.print_document({"openapi": "4.0.0"})
        captured = capfd.readouterr()
        assert json.loads(captured.out) == {"openapi": "4.0.0"}
        assert captured.err == ""

    def test_document_indent(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.print_document({"a": 1}, indent=4)
        assert capfd.readouterr().out == '{\n    "a": 1\n}\n'

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error"])
    def test_messages_go_to_stderr(self, capfd, method):
        mgr = OutputManager(no_color=True)
        getattr(mgr, method)("some message")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "some message" in captured.err

    def test_error_prefix(self, capfd):
        OutputManager(no_color=True).error("boom")
        assert capfd.readouterr().err == "Error: boom\n"


# ------------------------------------------------------------------ #
# Quiet / verbose
# ------------------------------------------------------------------ #


class TestQuietAndVerbose:
    def test_quiet_suppresses_info_and_success(self, capfd):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.info("info")
        mgr.success("done")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_warnings_and_errors(self, capfd):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.warning("careful")
        mgr.error("broken")
        err = capfd.readouterr().err
        assert "Warning: careful" in err
        assert "Error: broken" in err

    def test_debug_needs_verbose(self, capfd):
        OutputManager(no_color=True).debug("hidden")
        OutputManager(no_color=True, verbose=True).debug("shown")
        err = capfd.readouterr().err
        assert "hidden" not in err
        assert "[debug] shown" in err


# ------------------------------------------------------------------ #
# Output file
# ------------------------------------------------------------------ #


class TestOutputFile:
    def test_document_written_to_file(self, capfd, tmp_path: Path):
        target = tmp_path / "out.json"
        mgr = OutputManager(no_color=True)
        mgr.set_output_file(str(target))
        mgr.print_document({"paths": {}})
        assert json.loads(target.read_text(encoding="utf-8")) == {"paths": {}}
        assert capfd.readouterr().out == ""

    def test_non_ascii_kept(self, tmp_path: Path):
        target = tmp_path / "out.json"
        OutputManager(no_color=True, output_file=str(target)).print_document({"title": "Café"})
        assert '"Café"' in target.read_text(encoding="utf-8")


# ------------------------------------------------------------------ #
# Validation problems
# ------------------------------------------------------------------ #


class TestPrintProblems:
    def test_json_to_stderr(self, capfd):
        OutputManager(no_color=True).print_problems([_PROBLEM])
        captured = capfd.readouterr()
        assert captured.out == ""
        assert json.loads(captured.err) == [_PROBLEM]

    def test_table_to_stderr(self, capfd, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        OutputManager().print_problems([_PROBLEM], as_json=False)
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "PAR-001" in captured.err
        assert "Validation problems" in captured.err


# ------------------------------------------------------------------ #
# Global instance management
# ------------------------------------------------------------------ #


class TestGlobalOutput:
    def test_get_creates_default(self):
        reset_output()
        mgr = get_output()
        assert isinstance(mgr, OutputManager)
        assert get_output() is mgr

    def test_set_and_reset(self):
        mgr = OutputManager(quiet=True)
        set_output(mgr)
        assert get_output() is mgr
        reset_output()
        assert get_output() is not mgr

    def test_module_helpers_delegate(self, capfd):
        set_output(OutputManager(no_color=True, verbose=True))
        output_module.warning("w")
        output_module.debug("d")
        err = capfd.readouterr().err
        assert "Warning: w" in err
        assert "[debug] d" in err
