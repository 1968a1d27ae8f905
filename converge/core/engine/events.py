"""
Eventos de cambio y bus de notificaciones de una ejecución.

El bus vive lo que dura un converge(): los destinos de aristas notify se
suscriben a su origen; cuando el origen emite un evento el destino queda
marcado para refresh. Al terminar la ejecución se descarta.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Set

from converge.core.runtime.state import StateDiff

_MAX_VALUE_LEN = 60


class EventKind(str, Enum):
    CHANGE = "change"
    REFRESH = "refresh"


def summarize_value(value: Any) -> Any:
    """Resume valores largos (contenido de ficheros) para el reporte."""
    if isinstance(value, str) and (len(value) > _MAX_VALUE_LEN or "\n" in value):
        return f"<{len(value.encode('utf-8'))} bytes>"
    return value


class ChangeEvent:
    """Cambio (aplicado o previsto en dry-run) sobre un recurso."""
    def __init__(
        self,
        resource_id: str,
        kind: EventKind = EventKind.CHANGE,
        before: Optional[Dict[str, Any]] = None,
        after: Optional[Dict[str, Any]] = None,
        noop: bool = False,
        sources: Optional[List[str]] = None,
    ):
        self.resource_id = resource_id
        self.kind = EventKind(kind)
        self.before = before or {}
        self.after = after or {}
        self.noop = noop
        # Recursos cuyo cambio provocó este refresh
        self.sources = list(sources or [])

    @classmethod
    def from_diffs(cls, resource_id: str, diffs: List[StateDiff], noop: bool = False) -> "ChangeEvent":
        return cls(
            resource_id,
            EventKind.CHANGE,
            before={d.field: summarize_value(d.actual) for d in diffs},
            after={d.field: summarize_value(d.desired) for d in diffs},
            noop=noop,
        )

    @property
    def fields(self) -> List[str]:
        return list(self.after)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource": self.resource_id,
            "kind": self.kind.value,
            "before": self.before,
            "after": self.after,
            "noop": self.noop,
            "sources": self.sources,
        }

    def __repr__(self) -> str:
        mode = " (noop)" if self.noop else ""
        return f"ChangeEvent({self.kind.value} {self.resource_id}{mode})"


class EventBus:
    """Observer de una sola ejecución: origen -> destinos suscritos."""

    def __init__(self):
        self._subscribers: Dict[str, Set[str]] = {}
        self._pending: Dict[str, List[str]] = {}

    def subscribe(self, target: str, source: str) -> None:
        self._subscribers.setdefault(source, set()).add(target)

    def publish(self, event: ChangeEvent) -> List[str]:
        """Marca para refresh a los suscriptores del origen. Devuelve los destinos."""
        targets = sorted(self._subscribers.get(event.resource_id, ()))
        for target in targets:
            sources = self._pending.setdefault(target, [])
            if event.resource_id not in sources:
                sources.append(event.resource_id)
        return targets

    def pending(self, target: str) -> bool:
        return bool(self._pending.get(target))

    def pop(self, target: str) -> List[str]:
        return self._pending.pop(target, [])

    def clear(self) -> None:
        self._subscribers.clear()
        self._pending.clear()
