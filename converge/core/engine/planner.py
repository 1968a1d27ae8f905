"""
Planificación: convierte un reporte (normalmente de dry-run) en acciones legibles.

No ejecuta nada; la CLI lo usa para mostrar el plan.
"""

from typing import List

from converge.core.engine.events import EventKind
from converge.core.engine.report import ConvergenceReport


def plan_from_report(report: ConvergenceReport) -> List[str]:
    actions: List[str] = []
    for event in report.events:
        if event.kind == EventKind.REFRESH:
            origin = ", ".join(event.sources) or "notificación"
            actions.append(f"Refrescar {event.resource_id} (por {origin})")
            continue
        if event.before.get("ensure") in (None, "absent") and "ensure" in event.after:
            actions.append(f"Crear {event.resource_id}: ensure = {event.after['ensure']}")
            continue
        if event.after.get("ensure") == "absent":
            actions.append(f"Eliminar {event.resource_id}")
            continue
        for field, desired in event.after.items():
            actions.append(f"Actualizar {event.resource_id}.{field}: {event.before.get(field)} → {desired}")
    return actions
