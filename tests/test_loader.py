import pytest

from converge.core.errors import ConfigError, ValidationError
from jenkinsctl.core.resolver import AGENT_PASSWORD_ENV, CLI_AUTH_ENV, MANIFEST_ENV, manifest_path
from jenkinsctl.jenkins.loader import ManifestLoader


def test_defaults_without_manifest():
    manifest = ManifestLoader(None).load()
    assert manifest.jenkins.port == 8080
    assert manifest.jenkins.service_ensure == "running"
    assert not manifest.jenkins.cli_enabled
    assert not manifest.agent.enabled


def test_load_yaml(write_manifest):
    path = write_manifest(
        "jenkins:\n"
        "  executors: 42\n"
        "  agentagent_port: 7777\n"
        "agent:\n"
        "  enabled: true\n"
        "  labels: linux docker\n"
        "  mode: exclusive\n"
    )
    manifest = ManifestLoader(path).load()
    assert manifest.jenkins.executors == 42
    assert manifest.jenkins.agentagent_port == 7777
    assert manifest.jenkins.cli_enabled
    assert manifest.agent.labels == ["linux", "docker"]
    assert manifest.agent.mode == "exclusive"


def test_empty_file_gives_defaults(write_manifest):
    assert ManifestLoader(write_manifest("")).load().jenkins.port == 8080


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="no encontrado"):
        ManifestLoader(tmp_path / "nope.yaml").load()


def test_invalid_yaml(write_manifest):
    with pytest.raises(ConfigError, match="YAML"):
        ManifestLoader(write_manifest("jenkins: [unclosed\n")).load()


def test_manifest_must_be_mapping(write_manifest):
    with pytest.raises(ConfigError, match="diccionario"):
        ManifestLoader(write_manifest("- a\n- b\n")).load()


@pytest.mark.parametrize("text", [
    "jenkins:\n  port: 70000\n",
    "jenkins:\n  agentagent_port: -2\n",
    "jenkins:\n  service_ensure: started\n",
    "agent:\n  mode: sometimes\n",
    "agent:\n  executors: 0\n",
])
def test_out_of_domain_values(write_manifest, text):
    with pytest.raises(ValidationError, match="Manifiesto inválido"):
        ManifestLoader(write_manifest(text)).load()


def test_agent_password_from_env(monkeypatch):
    monkeypatch.setenv(AGENT_PASSWORD_ENV, "from-env")
    manifest = ManifestLoader.from_dict({"agent": {"enabled": True}})
    assert manifest.agent.ui_pass == "from-env"

    manifest = ManifestLoader.from_dict({"agent": {"enabled": True, "ui_pass": "yaml"}})
    assert manifest.agent.ui_pass == "yaml"


def test_cli_auth_from_env(monkeypatch):
    monkeypatch.setenv(CLI_AUTH_ENV, "admin:token")
    assert ManifestLoader.from_dict({}).jenkins.cli_auth == "admin:token"
    assert ManifestLoader.from_dict({"jenkins": {"executors": 42}}).jenkins.cli_auth == "admin:token"

    manifest = ManifestLoader.from_dict({"jenkins": {"cli_auth": "@/etc/jenkinsctl/cli.auth"}})
    assert manifest.jenkins.cli_auth == "@/etc/jenkinsctl/cli.auth"

    # host solo agente: no hay master al que autenticar
    assert ManifestLoader.from_dict({"jenkins": None}).jenkins is None


def test_default_java_args_skip_setup_wizard():
    java_args = ManifestLoader.from_dict({}).jenkins.java_args
    assert "-Djenkins.install.runSetupWizard=false" in java_args


def test_swarm_client_url():
    agent = ManifestLoader.from_dict({"agent": {"swarm_version": "3.40"}}).agent
    assert agent.client_url.endswith("/swarm-client/3.40/swarm-client-3.40.jar")
    assert agent.jar_name == "swarm-client-3.40.jar"


def test_manifest_path_resolution(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(MANIFEST_ENV, raising=False)
    explicit = tmp_path / "explicit.yaml"
    assert manifest_path(explicit) == explicit

    monkeypatch.setenv(MANIFEST_ENV, str(tmp_path / "env.yaml"))
    assert manifest_path() == tmp_path / "env.yaml"

    monkeypatch.delenv(MANIFEST_ENV)
    local = tmp_path / "jenkins.yaml"
    local.write_text("{}\n")
    assert manifest_path().resolve() == local.resolve()
