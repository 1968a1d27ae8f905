"""
Recurso JenkinsSetting: valor global de Jenkins leído y escrito por la CLI.

`get_<nombre>` devuelve el valor actual como texto; `set_<nombre> <valor>`
lo escribe. Solo hay un valor por nombre, así que el título es el nombre.
"""

from typing import Any, Dict, List, Optional

from converge.core.errors import ValidationError
from converge.core.resources.base import Resource
from converge.core.resources.validator import validate_choice, validate_port
from converge.core.runtime.state import StateDiff

SETTINGS = ("num_executors", "agentagent_port")


class JenkinsSetting(Resource):
    type_name = "JenkinsSetting"

    def __init__(
        self,
        name: str,
        value: int,
        service: Optional[str] = None,
        cli_jar: Optional[str] = None,
        **relations: Any,
    ):
        """
        Args:
            name: num_executors | agentagent_port
            value: Valor deseado
            service: Servicio de Jenkins; si no corre, el valor actual es desconocido
            cli_jar: jenkins-cli.jar; si no existe, el valor actual es desconocido
        """
        super().__init__(name, **relations)
        self.name = validate_choice(name, SETTINGS, f"{self.id}.name")
        if name == "agentagent_port":
            value = validate_port(value, self.id, allow_disabled=True)
        elif isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(f"{self.id}: valor inválido {value!r}")
        self.value = value
        self.service = service
        self.cli_jar = cli_jar

    def desired(self) -> Dict[str, Any]:
        return {"value": str(self.value)}

    def read_current(self, host: Any) -> Dict[str, Any]:
        # En dry-run sobre un host sin Jenkins todavía no hay CLI que consultar
        if self.service and not host.service_status(self.service).get("running"):
            return {"value": None}
        if self.cli_jar and host.stat_file(self.cli_jar) is None:
            return {"value": None}
        return {"value": host.jenkins_cli([f"get_{self.name}"]).strip()}

    def apply(self, host: Any, current: Dict[str, Any], diffs: List[StateDiff]) -> None:
        host.jenkins_cli([f"set_{self.name}", str(self.value)])
