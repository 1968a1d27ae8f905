"""Recurso Package: paquete del sistema instalado, ausente o en una versión concreta."""

import re
from typing import Any, Dict, List

from converge.core.errors import ValidationError
from converge.core.infra.contracts import HostAdapter
from converge.core.resources.base import Resource
from converge.core.resources.validator import validate_name
from converge.core.runtime.state import StateDiff

_VERSION_RE = re.compile(r"^[A-Za-z0-9.+:~_-]+$")
_KEYWORDS = ("present", "installed", "absent")


class Package(Resource):
    type_name = "Package"

    def __init__(self, name: str, ensure: str = "present", **relations: Any):
        super().__init__(name, **relations)
        self.name = validate_name(name, self.id)
        if not isinstance(ensure, str) or not (ensure in _KEYWORDS or _VERSION_RE.match(ensure)):
            raise ValidationError(f"{self.id}: ensure inválido {ensure!r}")
        self.ensure = "present" if ensure == "installed" else ensure

    def desired(self) -> Dict[str, Any]:
        return {"ensure": self.ensure}

    def read_current(self, host: HostAdapter) -> Dict[str, Any]:
        version = host.package_version(self.name)
        return {"ensure": version if version is not None else "absent"}

    def diff(self, current: Dict[str, Any]) -> List[StateDiff]:
        have = current.get("ensure", "absent")
        if self.ensure == "present":
            changed = have == "absent"
        else:
            changed = have != self.ensure
        if not changed:
            return []
        return [StateDiff(self.id, "ensure", self.ensure, have, "error")]

    def apply(self, host: HostAdapter, current: Dict[str, Any], diffs: List[StateDiff]) -> None:
        if self.ensure == "absent":
            host.remove_package(self.name)
        elif self.ensure == "present":
            host.install_package(self.name)
        else:
            host.install_package(self.name, self.ensure)
