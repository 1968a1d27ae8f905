"""
Motor de convergencia.

Recorre el grafo en orden topológico y, por cada recurso:
1. lee el estado real desde el host,
2. calcula el diff contra el deseado,
3. aplica la corrección mínima (o solo la registra en dry-run),
4. publica el cambio a los recursos suscritos, que se refrescan después
   de su propio diff/apply aunque este haya sido vacío.

Cualquier fallo de un recurso es fatal: se lanza ApplyError con el id del
recurso y la causa, sin reintentos ni continuación parcial.
"""

import logging
from typing import List

from converge.core.engine.events import ChangeEvent, EventBus, EventKind
from converge.core.engine.report import ConvergenceReport
from converge.core.errors import ApplyError
from converge.core.graph.graph import DependencyGraph, EdgeKind
from converge.core.infra.contracts import HostAdapter
from converge.core.resources.base import Resource
from converge.core.runtime.state import StateDiff

logger = logging.getLogger(__name__)


class ConvergenceEngine:
    """Aplica un grafo de recursos contra un host."""

    def __init__(self, host: HostAdapter):
        self.host = host

    def converge(self, graph: DependencyGraph, dry_run: bool = False) -> ConvergenceReport:
        # CycleError sale de aquí, antes de cualquier lectura o escritura
        order = graph.topological_order()

        bus = EventBus()
        for edge in graph.edges():
            if edge.kind == EdgeKind.NOTIFY:
                bus.subscribe(edge.target, edge.source)

        report = ConvergenceReport(dry_run=dry_run, host=getattr(self.host, "name", ""))
        logger.info(
            "Convergiendo %d recursos en %s%s",
            len(order), report.host or "host", " (dry-run)" if dry_run else "",
        )
        try:
            for resource in order:
                self._converge_resource(resource, bus, report, dry_run)
                report.resources_evaluated += 1
        finally:
            bus.clear()
            report.finish()

        logger.info("Convergencia terminada: %s", report.summary())
        return report

    def _converge_resource(
        self,
        resource: Resource,
        bus: EventBus,
        report: ConvergenceReport,
        dry_run: bool,
    ) -> None:
        diffs: List[StateDiff] = []
        try:
            current = resource.read_current(self.host)
            diffs = resource.diff(current)
            if diffs:
                if not dry_run:
                    resource.apply(self.host, current, diffs)
                event = ChangeEvent.from_diffs(resource.id, diffs, noop=dry_run)
                report.add(event)
                bus.publish(event)
                self._log_event(event)
            else:
                logger.debug("%s en estado deseado", resource.id)

            if bus.pending(resource.id):
                sources = bus.pop(resource.id)
                self._refresh(resource, diffs, sources, bus, report, dry_run)
        except ApplyError:
            raise
        except Exception as exc:
            logger.error("Fallo en %s: %s", resource.id, exc)
            raise ApplyError(resource.id, exc, report) from exc

    def _refresh(
        self,
        resource: Resource,
        diffs: List[StateDiff],
        sources: List[str],
        bus: EventBus,
        report: ConvergenceReport,
        dry_run: bool,
    ) -> None:
        if not resource.should_refresh(diffs):
            logger.debug("%s: refresh omitido (notificado por %s)", resource.id, ", ".join(sources))
            return
        if not dry_run:
            resource.refresh(self.host)
        event = ChangeEvent(resource.id, EventKind.REFRESH, noop=dry_run, sources=sources)
        report.add(event)
        bus.publish(event)
        self._log_event(event)

    def _log_event(self, event: ChangeEvent) -> None:
        verb = "cambiaría" if event.noop else "cambió"
        if event.kind == EventKind.REFRESH:
            verb = "se refrescaría" if event.noop else "refrescado"
            logger.info("%s %s por %s", event.resource_id, verb, ", ".join(event.sources))
            return
        for field in event.fields:
            logger.info(
                "%s.%s %s: %s -> %s",
                event.resource_id, field, verb, event.before.get(field), event.after.get(field),
            )


def converge(graph: DependencyGraph, host: HostAdapter, dry_run: bool = False) -> ConvergenceReport:
    """Atajo: ConvergenceEngine(host).converge(graph, dry_run)."""
    return ConvergenceEngine(host).converge(graph, dry_run=dry_run)

