"""
Comprobación de idempotencia.

Aplicar dos veces seguidas el mismo estado deseado debe dejar la segunda
ejecución sin eventos. Es la propiedad que definen las pruebas de
aceptación: aplicar, volver a aplicar y exigir "sin cambios".
"""

from typing import List

from converge.core.engine.engine import ConvergenceEngine
from converge.core.engine.events import ChangeEvent
from converge.core.engine.report import ConvergenceReport
from converge.core.graph.graph import DependencyGraph


class IdempotenceResult:
    """Resultado de dos ejecuciones consecutivas sobre el mismo grafo."""
    def __init__(self, first: ConvergenceReport, second: ConvergenceReport):
        self.first = first
        self.second = second

    @property
    def idempotent(self) -> bool:
        return not self.second.changed

    @property
    def offending_events(self) -> List[ChangeEvent]:
        """Eventos de la segunda ejecución: lo que no llegó a converger."""
        return list(self.second.events)


def check_idempotence(engine: ConvergenceEngine, graph: DependencyGraph) -> IdempotenceResult:
    first = engine.converge(graph, dry_run=False)
    second = engine.converge(graph, dry_run=False)
    return IdempotenceResult(first, second)


def verify(engine: ConvergenceEngine, graph: DependencyGraph) -> ConvergenceReport:
    """Dry-run: report.changed indica si algo cambiaría, sin tocar el host."""
    return engine.converge(graph, dry_run=True)
