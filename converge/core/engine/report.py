"""Reporte de convergencia: agregado de los ChangeEvent de una ejecución."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from converge.core.engine.events import ChangeEvent, EventKind


class ConvergenceReport:
    """
    Responde a "¿cambió algo?" para una ejecución.
    En dry-run los eventos son noop (cambios previstos, no aplicados).
    """

    def __init__(self, dry_run: bool = False, host: str = ""):
        self.dry_run = dry_run
        self.host = host
        self.started_at = datetime.now(timezone.utc)
        self.finished_at: Optional[datetime] = None
        self.resources_evaluated = 0
        self.events: List[ChangeEvent] = []

    def add(self, event: ChangeEvent) -> None:
        self.events.append(event)

    def finish(self) -> None:
        self.finished_at = datetime.now(timezone.utc)

    @property
    def changed(self) -> bool:
        return bool(self.events)

    @property
    def changes(self) -> List[ChangeEvent]:
        return [e for e in self.events if e.kind == EventKind.CHANGE]

    @property
    def refreshes(self) -> List[ChangeEvent]:
        return [e for e in self.events if e.kind == EventKind.REFRESH]

    @property
    def changed_resources(self) -> List[str]:
        seen: List[str] = []
        for e in self.events:
            if e.resource_id not in seen:
                seen.append(e.resource_id)
        return seen

    @property
    def duration(self) -> float:
        end = self.finished_at or datetime.now(timezone.utc)
        return (end - self.started_at).total_seconds()

    def summary(self) -> Dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "host": self.host,
            "resources": self.resources_evaluated,
            "changed": len(self.changes),
            "refreshed": len(self.refreshes),
            "duration": round(self.duration, 3),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary()
        data["started_at"] = self.started_at.isoformat()
        data["finished_at"] = self.finished_at.isoformat() if self.finished_at else None
        data["events"] = [e.to_dict() for e in self.events]
        return data
