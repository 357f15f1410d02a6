"""CLI tests for the convert and validate commands, run through Typer's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from openapi2moonwalk import __version__
from openapi2moonwalk.app import app

runner = CliRunner()

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
PETSTORE = str(FIXTURES_DIR / "petstore.json")


def _write_json(path: Path, data: Any) -> str:
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


@pytest.fixture
def invalid_spec(isolated_config: Path) -> str:
    return _write_json(isolated_config / "invalid.json", {
        "openapi": "3.0.3",
        "info": {"title": "Broken", "version": "1"},
        "paths": {"/pets/{id}": {"get": {"responses": {"200": {"description": "ok"}}}}},
    })


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"openapi2moonwalk {__version__}" in result.stdout

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "convert" in result.stdout
        assert "validate" in result.stdout


# ---------------------------------------------------------------------------
# convert
# ---------------------------------------------------------------------------


class TestConvertCommand:
    def test_prints_document(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "convert", PETSTORE])
        assert result.exit_code == 0, result.stderr
        document = json.loads(result.stdout)
        assert document["openapi"] == "4.0.0"
        assert "/pets{?limit,status,dryRun}" in document["paths"]

    def test_indent_option(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "convert", PETSTORE, "--indent", "0"])
        assert result.exit_code == 0
        assert result.stdout.startswith('{\n"openapi"')

    def test_output_file(self, isolated_config: Path) -> None:
        target = isolated_config / "petstore.moonwalk.json"
        result = runner.invoke(app, ["--no-color", "convert", PETSTORE, "-o", str(target)])
        assert result.exit_code == 0
        assert result.stdout == ""
        assert f"Wrote {target}" in result.stderr
        assert json.loads(target.read_text(encoding="utf-8"))["x-api-id"] == "petstore"

    def test_quiet_suppresses_success_message(self, isolated_config: Path) -> None:
        target = isolated_config / "out.json"
        result = runner.invoke(app, ["--no-color", "-q", "convert", PETSTORE, "-o", str(target)])
        assert result.exit_code == 0
        assert "Wrote" not in result.stderr
        assert target.is_file()

    def test_target_version_option(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "convert", PETSTORE, "--target-version", "4.0.0-rc1"])
        assert json.loads(result.stdout)["openapi"] == "4.0.0-rc1"

    def test_collect_security(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "convert", PETSTORE, "--collect-security"])
        delete = json.loads(result.stdout)["paths"]["/pets/{petId}"]["requests"]["deletePet"]
        assert delete["security"] == [{"api_key": []}, {"oauth": ["write:pets"]}]

    def test_project_config_is_used(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "openapi2moonwalk.json", {"target_version": "4.1.0"})
        result = runner.invoke(app, ["--no-color", "convert", PETSTORE])
        assert json.loads(result.stdout)["openapi"] == "4.1.0"

    def test_stdin_source(self, isolated_config: Path) -> None:
        spec = (FIXTURES_DIR / "petstore.json").read_text(encoding="utf-8")
        result = runner.invoke(app, ["--no-color", "convert", "-"], input=spec)
        assert result.exit_code == 0
        assert json.loads(result.stdout)["info"]["title"] == "Petstore API"

    def test_url_source(self, isolated_config: Path) -> None:
        mock_response = httpx.Response(
            status_code=200,
            text=(FIXTURES_DIR / "petstore.json").read_text(encoding="utf-8"),
            headers={"content-type": "application/json"},
            request=httpx.Request("GET", "https://example.com/openapi.json"),
        )
        with patch("openapi2moonwalk.parser.loader.httpx.get", return_value=mock_response):
            result = runner.invoke(app, ["--no-color", "convert", "https://example.com/openapi.json"])
        assert result.exit_code == 0
        assert "components" in json.loads(result.stdout)


class TestConvertErrors:
    def test_validation_failure_exits_7_with_problems(self, invalid_spec: str) -> None:
        result = runner.invoke(app, ["--no-color", "convert", invalid_spec])
        assert result.exit_code == 7
        assert result.stdout == ""
        assert "Error: Validation failed on input document." in result.stderr
        problems = json.loads(result.stderr[result.stderr.index("["):])
        assert [p["errorCode"] for p in problems] == ["PATH-001"]
        assert problems[0]["nodePath"] == "/paths/~1pets~1{id}"

    def test_skip_validation(self, invalid_spec: str) -> None:
        result = runner.invoke(app, ["--no-color", "convert", invalid_spec, "--skip-validation"])
        assert result.exit_code == 0
        assert "/pets/{id}" in json.loads(result.stdout)["paths"]

    def test_missing_file_exits_7(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "convert", "nope.json"])
        assert result.exit_code == 7
        assert "Input file not found: nope.json" in result.stderr

    def test_swagger_document_exits_7(self, isolated_config: Path) -> None:
        source = _write_json(isolated_config / "swagger.json", {"swagger": "2.0", "paths": {}})
        result = runner.invoke(app, ["--no-color", "convert", source])
        assert result.exit_code == 7
        assert "Swagger 2.0 is not supported" in result.stderr

    def test_naming_conflict_exits_8(self, isolated_config: Path) -> None:
        source = _write_json(isolated_config / "conflict.json", {
            "openapi": "3.0.3",
            "info": {"title": "Conflict", "version": "1"},
            "paths": {"/a": {"post": {
                "requestBody": {"content": {"text/plain": {}, "Text/Plain": {}}},
                "responses": {"200": {"description": "ok"}},
            }}},
        })
        result = runner.invoke(app, ["--no-color", "convert", source])
        assert result.exit_code == 8
        assert "post-text-plain" in result.stderr

        result = runner.invoke(app, ["--no-color", "convert", source, "--on-conflict", "warn"])
        assert result.exit_code == 0
        assert list(json.loads(result.stdout)["paths"]["/a"]["requests"]) == ["post-text-plain"]

    def test_bad_config_exits_1(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAPI2MOONWALK_INDENT", "wide")
        result = runner.invoke(app, ["--no-color", "convert", PETSTORE])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.stderr

    def test_unwritable_output_exits_2(self, isolated_config: Path) -> None:
        target = isolated_config / "missing-dir" / "out.json"
        result = runner.invoke(app, ["--no-color", "convert", PETSTORE, "-o", str(target)])
        assert result.exit_code == 2
        assert result.stdout == ""
        assert f"Error: Cannot write output file {target}: No such file or directory" in result.stderr
        assert "Unexpected error" not in result.stderr
        assert not target.exists()


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


class TestValidateCommand:
    def test_valid_document(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["--no-color", "validate", PETSTORE])
        assert result.exit_code == 0
        assert "No problems found." in result.stderr

    def test_invalid_document(self, invalid_spec: str) -> None:
        result = runner.invoke(app, ["--no-color", "validate", invalid_spec])
        assert result.exit_code == 7
        assert "Validation failed on input document (1 problem)" in result.stderr
        assert '"errorCode": "PATH-001"' in result.stderr

    def test_table_output(self, invalid_spec: str, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        result = runner.invoke(app, ["validate", invalid_spec, "--table"])
        assert result.exit_code == 7
        assert "PATH-001" in result.stderr
        assert "errorCode" not in result.stderr
