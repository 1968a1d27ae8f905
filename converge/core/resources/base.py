"""
Recurso base: unidad con nombre de estado deseado.

Un recurso sabe leer su estado real desde el host, calcular el diff contra
el deseado y aplicar la acción correctiva mínima. Las relaciones
(before/after/notify/subscribe) solo se declaran aquí; el grafo las resuelve.
"""

import re
from typing import Any, Dict, List, Union

from converge.core.errors import ValidationError
from converge.core.infra.contracts import HostAdapter
from converge.core.resources.validator import validate_title
from converge.core.runtime.state import StateDiff, diff_fields

_REF_RE = re.compile(r"^([A-Z][A-Za-z0-9_]*)\[(.+)\]$")


def make_id(type_name: str, title: str) -> str:
    return f"{type_name}[{title}]"


def parse_ref(ref: str) -> tuple:
    """'File[/etc/x]' -> ('File', '/etc/x')."""
    match = _REF_RE.match(ref or "")
    if not match:
        raise ValidationError(f"Referencia inválida: {ref!r} (formato esperado: Tipo[título])")
    return match.group(1), match.group(2)


def ref_id(ref: Union[str, "Resource"]) -> str:
    """Acepta un Resource o un id 'Tipo[título]' y devuelve el id."""
    if isinstance(ref, Resource):
        return ref.id
    if isinstance(ref, str):
        parse_ref(ref)
        return ref
    raise ValidationError(f"Referencia inválida: {ref!r}")


def _as_refs(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [ref_id(v) for v in value]
    return [ref_id(value)]


class Resource:
    """Base de todos los tipos de recurso."""

    type_name: str = "Resource"
    # Si reacciona a notificaciones (ej: reiniciar un servicio)
    refreshable: bool = False

    def __init__(
        self,
        title: str,
        before: Any = None,
        after: Any = None,
        require: Any = None,
        notify: Any = None,
        subscribe: Any = None,
    ):
        self.title = validate_title(title, self.type_name)
        self.before = _as_refs(before)
        self.after = _as_refs(after) + _as_refs(require)
        self.notify = _as_refs(notify)
        self.subscribe = _as_refs(subscribe)

    @property
    def id(self) -> str:
        return make_id(self.type_name, self.title)

    def desired(self) -> Dict[str, Any]:
        raise NotImplementedError

    def read_current(self, host: HostAdapter) -> Dict[str, Any]:
        raise NotImplementedError

    def diff(self, current: Dict[str, Any]) -> List[StateDiff]:
        return diff_fields(self.id, self.desired(), current)

    def apply(self, host: HostAdapter, current: Dict[str, Any], diffs: List[StateDiff]) -> None:
        raise NotImplementedError

    def should_refresh(self, diffs: List[StateDiff]) -> bool:
        """Decide si una notificación recibida debe producir un refresh."""
        return self.refreshable

    def refresh(self, host: HostAdapter) -> None:
        pass

    def autorequires(self) -> List[str]:
        """Ids que, si están declarados, deben converger antes que este recurso."""
        return []

    def __repr__(self) -> str:
        return f"<{self.id}>"
