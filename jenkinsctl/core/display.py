"""
Presentación con Rich de reportes, planes y grafos
"""

from typing import Dict, List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from converge.core.engine import ConvergenceReport, EventKind, IdempotenceResult, plan_from_report
from converge.core.graph import DependencyGraph, EdgeKind


def display_report(console: Console, report: ConvergenceReport) -> None:
    """Muestra los eventos de una ejecución agrupados por recurso"""
    if not report.changed:
        console.print("[green]✅ Sin cambios. Estado deseado y real coinciden.[/green]")
        return

    title = "Cambios previstos (dry-run)" if report.dry_run else "Cambios aplicados"
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Recurso", style="cyan")
    table.add_column("Campo", style="magenta")
    table.add_column("Antes", style="yellow")
    table.add_column("Después", style="green")

    for event in report.events:
        if event.kind == EventKind.REFRESH:
            origin = ", ".join(event.sources)
            table.add_row(escape(event.resource_id), "[blue]refresh[/blue]", "", f"[dim]por {escape(origin)}[/dim]")
            continue
        for field in event.fields:
            table.add_row(
                escape(event.resource_id),
                escape(field),
                escape(str(event.before.get(field))),
                escape(str(event.after.get(field))),
            )

    console.print(table)
    _print_summary(console, report)


def display_plan(console: Console, report: ConvergenceReport) -> None:
    """Muestra el plan en forma de acciones numeradas"""
    actions = plan_from_report(report)
    if not actions:
        console.print("[green]✅ Nada que hacer.[/green]")
        return
    console.print(f"[bold]Plan: {len(actions)} acción(es)[/bold]")
    for i, action in enumerate(actions, 1):
        console.print(f"  {i}. {escape(action)}")


def display_idempotence(console: Console, result: IdempotenceResult) -> None:
    _print_summary(console, result.first)
    if result.idempotent:
        console.print("[bold green]✅ Idempotente: la segunda ejecución no produjo cambios[/bold green]")
        return
    console.print("[bold red]❌ No idempotente. Cambios en la segunda ejecución:[/bold red]")
    for event in result.offending_events:
        detail = ', '.join(event.fields) or event.kind.value
        console.print(f"  [red]•[/red] {escape(event.resource_id)}: {escape(detail)}")


def display_graph(console: Console, graph: DependencyGraph) -> None:
    """Recursos en orden de aplicación con sus dependencias y notificaciones"""
    incoming: Dict[str, List[str]] = {}
    for edge in graph.edges():
        marker = "~>" if edge.kind == EdgeKind.NOTIFY else "->"
        incoming.setdefault(edge.target, []).append(f"{edge.source} {marker}")

    table = Table(title="Orden de aplicación", show_header=True, header_style="bold")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Recurso", style="cyan")
    table.add_column("Depende de", style="dim")

    for i, resource in enumerate(graph.topological_order(), 1):
        table.add_row(str(i), escape(resource.id), escape("\n".join(incoming.get(resource.id, []))))
    console.print(table)


def _print_summary(console: Console, report: ConvergenceReport) -> None:
    summary = report.summary()
    console.print(
        f"[dim]{summary['resources']} recursos evaluados · "
        f"{summary['changed']} cambiados · {summary['refreshed']} refrescados · "
        f"{summary['duration']}s[/dim]"
    )
