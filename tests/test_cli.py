import json

import pytest
import typer
from typer.testing import CliRunner

from converge.core.errors import ApplyError, ProviderError
from jenkinsctl.cli import app
from jenkinsctl.jenkins import cli as jenkins_cli

cli_runner = CliRunner()

SCENARIO = (
    "jenkins:\n"
    "  executors: 42\n"
    "  agentagent_port: 7777\n"
)


def invoke(*args):
    # Ancho fijo: las tablas no parten los ids largos
    return cli_runner.invoke(app, list(args), env={"COLUMNS": "200"})


def test_version():
    result = invoke("version")
    assert result.exit_code == 0
    assert "1.0.0" in result.output


def test_info_lists_commands():
    result = invoke("info")
    assert result.exit_code == 0
    assert "agent-port" in result.output


def test_apply_mock(write_manifest):
    path = write_manifest(SCENARIO)
    result = invoke("jenkins", "apply", "--mock", "--platform", "debian", "-m", str(path))
    assert result.exit_code == 0, result.output
    assert "Cambios aplicados" in result.output
    assert "Package[jenkins]" in result.output


def test_apply_json(write_manifest):
    path = write_manifest(SCENARIO)
    result = invoke("jenkins", "apply", "--mock", "--platform", "debian", "-m", str(path), "--json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["dry_run"] is False
    assert data["changed"] > 0


def test_plan_mock_on_empty_host(write_manifest):
    path = write_manifest(SCENARIO)
    result = invoke("jenkins", "plan", "--mock", "--platform", "redhat", "-m", str(path))
    assert result.exit_code == 0, result.output
    assert "Plan:" in result.output
    assert "Crear Package[jenkins]: ensure = present" in result.output
    assert "Crear File[/var/lib/jenkins]: ensure = directory" in result.output


def test_check_mock_is_idempotent(write_manifest):
    path = write_manifest(SCENARIO)
    result = invoke("jenkins", "check", "--mock", "--platform", "debian", "-m", str(path))
    assert result.exit_code == 0, result.output
    assert "Idempotente" in result.output


def test_graph(write_manifest):
    path = write_manifest(SCENARIO)
    result = invoke("jenkins", "graph", "--platform", "debian", "-m", str(path))
    assert result.exit_code == 0, result.output
    assert "Orden de aplicación" in result.output
    assert "Service[jenkins]" in result.output
    assert "File[/var/lib/jenkins]" in result.output


def test_agent_port_mock(write_manifest):
    path = write_manifest(SCENARIO)
    result = invoke("jenkins", "agent-port", "--mock", "--platform", "debian", "-m", str(path))
    assert result.exit_code == 0, result.output
    assert "7777" in result.output

    result = invoke("jenkins", "agent-port", "--set", "50000", "--mock", "--platform", "debian", "-m", str(path))
    assert result.exit_code == 0, result.output
    assert "50000" in result.output


def test_invalid_manifest_exits_1(write_manifest):
    path = write_manifest("jenkins:\n  port: 70000\n")
    result = invoke("jenkins", "apply", "--mock", "--platform", "debian", "-m", str(path))
    assert result.exit_code == 1
    assert "Manifiesto inválido" in result.output


def test_missing_manifest_exits_1(tmp_path):
    result = invoke("jenkins", "apply", "--mock", "-m", str(tmp_path / "nope.yaml"))
    assert result.exit_code == 1
    assert "no encontrado" in result.output


def test_darwin_agent_exits_1(write_manifest):
    path = write_manifest("agent:\n  enabled: true\n")
    result = invoke("jenkins", "plan", "--mock", "--platform", "darwin", "-m", str(path))
    assert result.exit_code == 1
    assert "darwin" in result.output


def test_apply_error_on_file_exits_1():
    with pytest.raises(typer.Exit) as exc:
        jenkins_cli._fail(ApplyError("File[/etc/default/jenkins]", ProviderError("disco lleno")))
    assert exc.value.exit_code == 1
