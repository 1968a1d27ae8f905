"""
Recurso Service: servicio supervisado (running/stopped, habilitado al arranque).

Es refrescable: una notificación de un recurso del que depende (fichero de
configuración, paquete) provoca un reinicio, aunque su propio diff sea vacío.
"""

from typing import Any, Dict, List, Optional

from converge.core.errors import ValidationError
from converge.core.infra.contracts import HostAdapter
from converge.core.resources.base import Resource
from converge.core.resources.validator import validate_choice, validate_name
from converge.core.runtime.state import StateDiff

SERVICE_ENSURE = ("running", "stopped")


class Service(Resource):
    type_name = "Service"
    refreshable = True

    def __init__(
        self,
        name: str,
        ensure: Optional[str] = "running",
        enable: Optional[bool] = True,
        **relations: Any,
    ):
        super().__init__(name, **relations)
        self.name = validate_name(name, self.id)
        self.ensure = validate_choice(ensure, SERVICE_ENSURE, f"{self.id}.ensure") if ensure is not None else None
        if enable is not None and not isinstance(enable, bool):
            raise ValidationError(f"{self.id}: enable debe ser booleano: {enable!r}")
        self.enable = enable

    def desired(self) -> Dict[str, Any]:
        return {"ensure": self.ensure, "enable": self.enable}

    def read_current(self, host: HostAdapter) -> Dict[str, Any]:
        status = host.service_status(self.name)
        return {
            "ensure": "running" if status.get("running") else "stopped",
            "enable": bool(status.get("enabled")),
        }

    def apply(self, host: HostAdapter, current: Dict[str, Any], diffs: List[StateDiff]) -> None:
        fields = {d.field for d in diffs}
        if "enable" in fields:
            if self.enable:
                host.enable_service(self.name)
            else:
                host.disable_service(self.name)
        if "ensure" in fields:
            if self.ensure == "running":
                host.start_service(self.name)
            else:
                host.stop_service(self.name)

    def should_refresh(self, diffs: List[StateDiff]) -> bool:
        # Un servicio parado no se reinicia; uno recién arrancado ya leyó su configuración
        if self.ensure == "stopped":
            return False
        return not any(d.field == "ensure" for d in diffs)

    def refresh(self, host: HostAdapter) -> None:
        host.restart_service(self.name)
