"""Tests for the CLI commands.

Registry traffic is served by an in-memory transport; `create_client` is
patched to hand it to the commands.
"""

import json
from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from cli.main import app, log_level_callback

runner = CliRunner()


# --- Test Fixtures --- #


@pytest.fixture
def use_registry(make_client):
    """Patch the CLI's client factory to serve the given routes."""
    patchers = []

    def _use(routes):
        client = make_client(routes)
        patcher = patch("cli.main.create_client", return_value=client)
        patchers.append(patcher)
        return patcher.start()

    yield _use
    for patcher in patchers:
        patcher.stop()


# --- General --- #


def test_info_command(monkeypatch):
    monkeypatch.setattr("core.initialization._INITIALIZED", False)
    monkeypatch.setenv("SCHEMA_REGISTRY_URL", "http://info-registry:8081")

    result = runner.invoke(app, ["info"])

    assert result.exit_code == 0
    assert "Schema Registry CLI Information" in result.stdout
    assert "http://info-registry:8081" in result.stdout


def test_help_command():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Schema Registry CLI" in result.stdout


def test_non_existent_command():
    result = runner.invoke(app, ["nonexistentcommand"])
    assert result.exit_code != 0


@patch("cli.main.setup_logging")
def test_log_level_callback(mock_setup_logging, use_registry):
    use_registry({"/subjects": []})
    result = runner.invoke(app, ["--log-level", "DEBUG", "subjects"])
    assert result.exit_code == 0
    mock_setup_logging.assert_called_with(log_level_arg="DEBUG")


@patch("cli.main.setup_logging")
def test_log_level_callback_no_level(mock_setup_logging):
    log_level_callback(None)
    mock_setup_logging.assert_not_called()


# --- subjects --- #


def test_subjects_success(use_registry):
    use_registry({"/subjects": ["foo", "bar"]})

    result = runner.invoke(app, ["subjects"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == ["foo", "bar"]


def test_subjects_passes_url(use_registry):
    mock_create = use_registry({"/subjects": []})

    runner.invoke(app, ["subjects", "--url", "http://other:8081"])

    mock_create.assert_called_once_with(url="http://other:8081")


def test_subjects_failure(use_registry):
    use_registry({"/subjects": httpx.Response(503)})

    result = runner.invoke(app, ["subjects"])

    assert result.exit_code == 1
    assert "Registry request failed" in result.stdout
    assert "Service Unavailable" in result.stdout


def test_invalid_url_exits_with_code_2():
    result = runner.invoke(app, ["subjects", "--url", "not-a-url"])

    assert result.exit_code == 2
    assert "Invalid registry settings" in result.stdout


# --- schema --- #


def test_schema_success(use_registry, schema_record):
    use_registry({"/subjects/foo/versions/2": schema_record("foo", version=2)})

    result = runner.invoke(app, ["schema", "foo", "--version", "2"])

    assert result.exit_code == 0
    record = json.loads(result.stdout)
    assert record["subject"] == "foo"
    assert record["version"] == 2
    assert record["schema"] == '{"type":"string"}'


def test_schema_not_found(use_registry):
    use_registry({})

    result = runner.invoke(app, ["schema", "missing"])

    assert result.exit_code == 1
    assert "404" in result.stdout
    assert "Subject not found." in result.stdout


# --- schemas --- #


def test_schemas_success(use_registry, happy_routes):
    use_registry(happy_routes)

    result = runner.invoke(app, ["schemas"])

    assert result.exit_code == 0
    assert "Decoded 2 schemas." in result.stdout
    assert '"foo"' in result.stdout
    assert '"bar"' in result.stdout


def test_schemas_saves_output(use_registry, happy_routes, tmp_path):
    use_registry(happy_routes)
    output_file = tmp_path / "schemas.json"

    result = runner.invoke(app, ["schemas", "--output", str(output_file)])

    assert result.exit_code == 0
    assert json.loads(output_file.read_text()) == {
        "foo": {"type": "string"},
        "bar": {"type": "string"},
    }


def test_schemas_output_write_error(use_registry, happy_routes, tmp_path):
    use_registry(happy_routes)
    output_file = tmp_path / "missing-dir" / "schemas.json"

    result = runner.invoke(app, ["schemas", "--output", str(output_file)])

    assert result.exit_code == 1
    assert "Error saving schemas to file" in result.stdout


def test_schemas_list_failure(use_registry):
    use_registry({"/subjects": httpx.Response(404)})

    result = runner.invoke(app, ["schemas"])

    assert result.exit_code == 1
    assert "failed at stage get_subjects" in result.stdout
    assert "Code: 404" in result.stdout
    assert "Reason: Not Found" in result.stdout


def test_schemas_fetch_failure(use_registry):
    use_registry({"/subjects": ["foo"]})

    result = runner.invoke(app, ["schemas"])

    assert result.exit_code == 1
    assert "failed at stage get_schema" in result.stdout
    assert "Subject: foo" in result.stdout


def test_schemas_decode_failure(use_registry, schema_record):
    use_registry(
        {
            "/subjects": ["foo"],
            "/subjects/foo/versions/latest": schema_record("foo", "invalid json"),
        }
    )

    result = runner.invoke(app, ["schemas"])

    assert result.exit_code == 1
    assert "failed at stage decode_schema" in result.stdout
    assert "Code: 1" in result.stdout
