"""
Contratos de estado: diferencia entre estado deseado y real.

El core NO lee el host directamente; cada recurso obtiene el estado real
a través del HostAdapter y lo compara contra su estado deseado.
"""

from typing import Any, Dict, List


class StateDiff:
    """Diferencia entre estado deseado y real de un campo de un recurso."""
    def __init__(
        self,
        resource_id: str,
        field: str,
        desired: Any,
        actual: Any,
        severity: str = "warning"
    ):
        self.resource_id = resource_id
        self.field = field
        self.desired = desired
        self.actual = actual
        self.severity = severity  # "error", "warning", "info"

    def __repr__(self) -> str:
        return f"StateDiff({self.resource_id}.{self.field}: {self.actual!r} -> {self.desired!r})"


def diff_fields(resource_id: str, desired: Dict[str, Any], current: Dict[str, Any]) -> List[StateDiff]:
    """
    Compara campo a campo. Los campos deseados en None no se gestionan.
    Un campo "ensure" distinto se marca como error (el recurso no existe o sobra).
    """
    diffs: List[StateDiff] = []
    for field, want in desired.items():
        if want is None:
            continue
        have = current.get(field)
        if want != have:
            severity = "error" if field == "ensure" else "warning"
            diffs.append(StateDiff(resource_id, field, want, have, severity))
    return diffs

