from rich.console import Console

from converge.core.graph import build_graph
from jenkinsctl.core.doctor import REQUIRED_TOOLS, run_doctor
from jenkinsctl.jenkins.catalog import build_catalog
from jenkinsctl.jenkins.loader import ManifestLoader
from jenkinsctl.platforms.params import DEBIAN


def test_missing_tools_reported(runner):
    runner.respond(["which"], ok=False)
    results = run_doctor(Console(record=True, width=200), "debian", runner=runner)
    assert all(not results[f"tool_{tool}"] for tool in REQUIRED_TOOLS["debian"])


def test_jenkins_port_from_host_listening_ports(host, engine, runner):
    manifest = ManifestLoader.from_dict({"jenkins": {"agentagent_port": 7777}})
    engine.converge(build_graph(build_catalog(manifest, DEBIAN)))

    console = Console(record=True, width=200)
    results = run_doctor(console, "debian", jenkins_port=8080, runner=runner, host=host)

    assert results["jenkins_port"]
    assert all(results[f"tool_{tool}"] for tool in REQUIRED_TOOLS["debian"])
    assert "7777, 8080" in console.export_text()
