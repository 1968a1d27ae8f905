#!/usr/bin/env python3
"""
Módulo Jenkins - jenkinsctl
Convergencia declarativa de un host Jenkins (master y agente swarm)
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from converge.core.engine import ConvergenceEngine, check_idempotence, verify
from converge.core.errors import ApplyError, ConvergeError
from converge.core.graph import DependencyGraph, build_graph
from jenkinsctl.core.display import display_graph, display_idempotence, display_plan, display_report
from jenkinsctl.core.resolver import manifest_path
from jenkinsctl.jenkins.catalog import build_catalog
from jenkinsctl.jenkins.loader import ManifestLoader
from jenkinsctl.jenkins.models import Manifest
from jenkinsctl.jenkins.setting import JenkinsSetting
from jenkinsctl.platforms import resolve_params, select_host

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="jenkins",
    help="Convergencia de un host Jenkins (instalación, configuración, agente swarm)",
    add_completion=False,
    no_args_is_help=True
)
console = Console()

MANIFEST_OPTION = typer.Option(None, "--manifest", "-m", help="Manifiesto YAML (por defecto: jenkins.yaml)")
MOCK_OPTION = typer.Option(False, "--mock", help="Usa un host simulado en memoria")
PLATFORM_OPTION = typer.Option(None, "--platform", "-p", help="Forzar familia: debian | redhat | darwin | default")


def _prepare(
    manifest_file: Optional[Path], platform: Optional[str], mock: bool
) -> Tuple[Manifest, ConvergenceEngine, DependencyGraph]:
    """Carga manifiesto, elige plataforma y host, y construye el grafo"""
    path = manifest_path(manifest_file)
    manifest = ManifestLoader(path).load()
    params = resolve_params(platform or manifest.platform)
    master = manifest.jenkins
    host = select_host(
        params,
        mock=mock,
        jenkins_port=master.port if master else 8080,
        cli_auth=master.cli_auth if master else None,
    )
    logger.info("Manifiesto %s, plataforma %s, host %s", path or "(por defecto)", params.family, host.name)
    graph = build_graph(build_catalog(manifest, params))
    return manifest, ConvergenceEngine(host), graph


def _fail(error: ConvergeError) -> None:
    """Muestra el error y termina con código 1"""
    console.print(f"[bold red]❌ {escape(str(error))}[/bold red]")
    if isinstance(error, ApplyError) and error.report is not None and error.report.events:
        console.print("[dim]Cambios aplicados antes del fallo:[/dim]")
        display_report(console, error.report)
    raise typer.Exit(code=1)


@app.command()
def apply(
    manifest: Optional[Path] = MANIFEST_OPTION,
    dry_run: bool = typer.Option(False, "--dry-run", help="Modo simulación, no ejecuta acciones reales"),
    mock: bool = MOCK_OPTION,
    platform: Optional[str] = PLATFORM_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Salida del reporte en JSON"),
):
    """
    Converge el host al estado del manifiesto

    Ejemplos:
        jenkinsctl jenkins apply                    # Aplica ./jenkins.yaml
        jenkinsctl jenkins apply --dry-run          # Muestra qué cambiaría
        jenkinsctl jenkins apply -m host.yaml --mock
    """
    try:
        _, engine, graph = _prepare(manifest, platform, mock)
        report = engine.converge(graph, dry_run=dry_run)
    except ConvergeError as e:
        _fail(e)
        return

    if as_json:
        console.print_json(data=report.to_dict())
        return

    mode = "Dry-run" if dry_run else "Apply"
    console.print(Panel.fit(f"[bold cyan]Jenkins - {mode} ({engine.host.name})[/bold cyan]", border_style="cyan"))
    display_report(console, report)


@app.command()
def plan(
    manifest: Optional[Path] = MANIFEST_OPTION,
    mock: bool = MOCK_OPTION,
    platform: Optional[str] = PLATFORM_OPTION,
):
    """
    Lista las acciones que aplicaría 'apply' sin tocar el host

    Ejemplo: jenkinsctl jenkins plan
    """
    try:
        _, engine, graph = _prepare(manifest, platform, mock)
        report = verify(engine, graph)
    except ConvergeError as e:
        _fail(e)
        return
    display_plan(console, report)


@app.command()
def check(
    manifest: Optional[Path] = MANIFEST_OPTION,
    mock: bool = MOCK_OPTION,
    platform: Optional[str] = PLATFORM_OPTION,
):
    """
    Verifica idempotencia: aplica dos veces y exige que la segunda no cambie nada

    Sale con código 1 si la segunda ejecución produce cambios.
    """
    try:
        _, engine, graph = _prepare(manifest, platform, mock)
        result = check_idempotence(engine, graph)
    except ConvergeError as e:
        _fail(e)
        return

    display_idempotence(console, result)
    if not result.idempotent:
        raise typer.Exit(code=1)


@app.command()
def graph(
    manifest: Optional[Path] = MANIFEST_OPTION,
    platform: Optional[str] = PLATFORM_OPTION,
):
    """Muestra el orden de aplicación y las dependencias del catálogo"""
    try:
        _, _, dependency_graph = _prepare(manifest, platform, mock=True)
        display_graph(console, dependency_graph)
    except ConvergeError as e:
        _fail(e)


@app.command("agent-port")
def agent_port(
    set_port: Optional[int] = typer.Option(None, "--set", help="Nuevo puerto TCP para agentes (-1 deshabilita)"),
    manifest: Optional[Path] = MANIFEST_OPTION,
    mock: bool = MOCK_OPTION,
    platform: Optional[str] = PLATFORM_OPTION,
):
    """
    Lee o fija el puerto de agentes de Jenkins vía jenkins-cli

    Ejemplos:
        jenkinsctl jenkins agent-port
        jenkinsctl jenkins agent-port --set 7777
    """
    try:
        _, engine, dependency_graph = _prepare(manifest, platform, mock)
        if mock:
            # El host simulado arranca vacío: se converge primero el manifiesto
            engine.converge(dependency_graph)

        if set_port is not None:
            setting = JenkinsSetting("agentagent_port", set_port)
            report = engine.converge(build_graph([setting]))
            if report.changed:
                console.print(f"[green]✔ Puerto de agentes fijado a {set_port}[/green]")
            else:
                console.print(f"[dim]El puerto de agentes ya era {set_port}[/dim]")
            return

        value = engine.host.jenkins_cli(["get_agentagent_port"]).strip()
    except ConvergeError as e:
        _fail(e)
        return
    console.print(f"[bold]Puerto de agentes:[/bold] {escape(value)}")
