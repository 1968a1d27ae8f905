#!/usr/bin/env python3
"""
jenkinsctl - CLI de convergencia para hosts Jenkins
Instala, configura y supervisa Jenkins (y su agente swarm) de forma idempotente
"""

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from jenkinsctl import __version__
from jenkinsctl.core.doctor import run_doctor
from jenkinsctl.core.logs import setup_logging
from jenkinsctl.core.resolver import load_env
from jenkinsctl.jenkins.cli import app as jenkins_app
from jenkinsctl.platforms import detect_family, params_for, select_host

# CLI principal
app = typer.Typer(
    name="jenkinsctl",
    help="jenkinsctl - Convergencia declarativa de hosts Jenkins",
    add_completion=False,
    no_args_is_help=True
)

console = Console()

app.add_typer(jenkins_app, name="jenkins", help="Master y agente swarm: apply, plan, check, graph")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Logging de depuración"),
):
    """Carga .env y configura el logging antes de cada comando"""
    load_env()
    setup_logging("DEBUG" if verbose else None, console=console)


@app.command()
def version():
    """Muestra la versión de jenkinsctl"""
    console.print(Panel.fit(
        "[bold cyan]jenkinsctl[/bold cyan]\n"
        "[dim]Convergencia declarativa de hosts Jenkins[/dim]\n\n"
        f"[bold]Versión:[/bold] {__version__}\n"
        f"[bold]Plataforma detectada:[/bold] {detect_family()}",
        border_style="cyan"
    ))


@app.command()
def info():
    """Muestra los comandos disponibles"""
    console.print(Panel.fit("[bold cyan]jenkinsctl - Información[/bold cyan]", border_style="cyan"))

    table = Table(title="Comandos de 'jenkins'", show_header=True, header_style="bold cyan")
    table.add_column("Comando", style="cyan", width=12)
    table.add_column("Descripción", style="green")

    table.add_row("apply", "Converge el host al manifiesto (--dry-run para simular)")
    table.add_row("plan", "Lista las acciones previstas sin aplicar")
    table.add_row("check", "Aplica dos veces y verifica idempotencia")
    table.add_row("graph", "Orden de aplicación y dependencias")
    table.add_row("agent-port", "Lee o fija el puerto de agentes vía jenkins-cli")

    console.print(table)
    console.print("\n[dim]Usa 'jenkinsctl jenkins <comando> --help' para ver opciones[/dim]")


@app.command()
def doctor(
    platform: Optional[str] = typer.Option(None, "--platform", "-p", help="Familia a verificar (por defecto: detectada)"),
    port: int = typer.Option(8080, "--port", help="Puerto HTTP esperado de Jenkins"),
):
    """Verifica herramientas y requisitos del host"""
    family = platform or detect_family()
    host = select_host(params_for(family))
    results = run_doctor(console, family, jenkins_port=port, host=host)
    missing_tools = [k for k, ok in results.items() if k.startswith("tool_") and not ok]
    if missing_tools:
        raise typer.Exit(code=1)


def main():
    app()


if __name__ == "__main__":
    main()
