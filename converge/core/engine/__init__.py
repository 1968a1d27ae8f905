"""
Engine: convergencia, eventos de cambio, reporte e idempotencia.

Planificación (orden topológico) y ejecución están separadas: el grafo
ordena, el motor aplica.
"""

from converge.core.engine.engine import ConvergenceEngine, converge
from converge.core.engine.events import ChangeEvent, EventBus, EventKind
from converge.core.engine.idempotence import IdempotenceResult, check_idempotence, verify
from converge.core.engine.planner import plan_from_report
from converge.core.engine.report import ConvergenceReport

__all__ = [
    "ChangeEvent",
    "ConvergenceEngine",
    "ConvergenceReport",
    "EventBus",
    "EventKind",
    "IdempotenceResult",
    "check_idempotence",
    "converge",
    "plan_from_report",
    "verify",
]
