"""
Módulo Doctor - Verificación de herramientas y requisitos del host
"""

import os
import socket
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from jenkinsctl.core.tools import Runner, run_command

# Herramientas que usa cada adaptador de plataforma
REQUIRED_TOOLS: Dict[str, List[str]] = {
    "debian": ["java", "systemctl", "dpkg-query", "apt-get", "getent", "useradd", "ss"],
    "redhat": ["java", "systemctl", "rpm", "yum", "getent", "useradd", "ss"],
    "darwin": ["java", "brew", "dscl", "dseditgroup", "sysadminctl"],
}


def check_tool(tool_name: str, runner: Runner = run_command) -> Tuple[bool, Optional[str]]:
    """
    Verifica si una herramienta está instalada y disponible

    Args:
        tool_name: Nombre del comando a verificar
        runner: Ejecutor de comandos

    Returns:
        Tuple (is_available, path)
    """
    ok, stdout, _ = runner(["which", tool_name], timeout=2)
    if not ok:
        return False, None
    return True, stdout.strip()[:50] or None


def check_port(port: int, host: str = "localhost", timeout: int = 2) -> bool:
    """True si hay algo escuchando en host:port"""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def run_doctor(
    console: Console,
    family: str,
    jenkins_port: int = 8080,
    runner: Runner = run_command,
    host: Optional[Any] = None,
) -> Dict[str, bool]:
    """
    Ejecuta verificación completa del host (doctor)

    Args:
        console: Console de Rich para salida
        family: Familia de plataforma (debian, redhat, darwin)
        jenkins_port: Puerto HTTP esperado de Jenkins
        host: Adaptador de host; sus puertos en escucha evitan abrir un socket

    Returns:
        Dict con resultados de verificación
    """
    required_tools = REQUIRED_TOOLS.get(family, [])

    console.print(Panel.fit(f"[bold cyan]Doctor - Host {family}[/bold cyan]", border_style="cyan"))

    results: Dict[str, bool] = {}

    console.print("\n[bold]Herramientas[/bold]")
    tool_table = Table(show_header=True, header_style="bold cyan")
    tool_table.add_column("Herramienta", style="cyan")
    tool_table.add_column("Estado", style="green")
    tool_table.add_column("Ruta", style="dim")

    for tool in required_tools:
        available, path = check_tool(tool, runner)
        status = "[green]✔ Disponible[/green]" if available else "[red]✘ No encontrado[/red]"
        tool_table.add_row(tool, status, path or "[dim]N/A[/dim]")
        results[f"tool_{tool}"] = available

    console.print(tool_table)

    console.print("\n[bold]Entorno[/bold]")
    env_table = Table(show_header=True, header_style="bold cyan")
    env_table.add_column("Comprobación", style="cyan")
    env_table.add_column("Estado", style="green")

    results["root"] = os.geteuid() == 0
    ports = host.listening_ports() if host is not None else []
    results["jenkins_port"] = jenkins_port in ports or check_port(jenkins_port)
    env_table.add_row(
        "Root",
        "[green]✔ Sí[/green]" if results["root"] else "[yellow]⚠ No (apply necesitará sudo)[/yellow]",
    )
    env_table.add_row(
        f"Jenkins en :{jenkins_port}",
        "[green]✔ Escuchando[/green]" if results["jenkins_port"] else "[yellow]⚠ Sin respuesta[/yellow]",
    )
    env_table.add_row("Puertos TCP en escucha", ", ".join(str(p) for p in ports) or "[dim]N/A[/dim]")
    console.print(env_table)

    missing = [tool for tool in required_tools if not results.get(f"tool_{tool}", False)]
    if not missing:
        console.print("\n[bold green]✅ Todas las herramientas requeridas están disponibles[/bold green]")
    else:
        console.print("\n[yellow]⚠️ Algunas herramientas faltan[/yellow]")
        console.print(f"[dim]Faltan: {', '.join(missing)}[/dim]")

    return results
