"""
Recursos Group y User.

La pertenencia a grupos es "mínima": el usuario debe estar al menos en los
grupos declarados; grupos extra en el host no se consideran drift.
"""

from typing import Any, Dict, List, Optional

from converge.core.infra.contracts import HostAdapter
from converge.core.resources.base import Resource, make_id
from converge.core.resources.validator import validate_absolute_path, validate_choice, validate_name
from converge.core.runtime.state import StateDiff

ENSURE_VALUES = ("present", "absent")


class Group(Resource):
    type_name = "Group"

    def __init__(self, name: str, ensure: str = "present", system: bool = False, **relations: Any):
        super().__init__(name, **relations)
        self.name = validate_name(name, self.id)
        self.ensure = validate_choice(ensure, ENSURE_VALUES, f"{self.id}.ensure")
        self.system = system

    def desired(self) -> Dict[str, Any]:
        return {"ensure": self.ensure}

    def read_current(self, host: HostAdapter) -> Dict[str, Any]:
        return {"ensure": "present" if host.get_group(self.name) is not None else "absent"}

    def apply(self, host: HostAdapter, current: Dict[str, Any], diffs: List[StateDiff]) -> None:
        if self.ensure == "absent":
            host.remove_group(self.name)
        else:
            host.create_group(self.name, system=self.system)


class User(Resource):
    type_name = "User"

    def __init__(
        self,
        name: str,
        ensure: str = "present",
        home: Optional[str] = None,
        shell: Optional[str] = None,
        groups: Optional[List[str]] = None,
        system: bool = False,
        **relations: Any,
    ):
        super().__init__(name, **relations)
        self.name = validate_name(name, self.id)
        self.ensure = validate_choice(ensure, ENSURE_VALUES, f"{self.id}.ensure")
        self.home = validate_absolute_path(home, f"{self.id}.home") if home is not None else None
        self.shell = validate_absolute_path(shell, f"{self.id}.shell") if shell is not None else None
        self.groups = sorted(validate_name(g, f"{self.id}.groups") for g in groups) if groups is not None else None
        self.system = system

    def desired(self) -> Dict[str, Any]:
        if self.ensure == "absent":
            return {"ensure": "absent"}
        return {"ensure": "present", "home": self.home, "shell": self.shell, "groups": self.groups}

    def read_current(self, host: HostAdapter) -> Dict[str, Any]:
        info = host.get_user(self.name)
        if info is None:
            return {"ensure": "absent"}
        return {
            "ensure": "present",
            "home": info.get("home"),
            "shell": info.get("shell"),
            "groups": sorted(info.get("groups") or []),
        }

    def diff(self, current: Dict[str, Any]) -> List[StateDiff]:
        diffs = []
        for d in super().diff(current):
            if d.field == "groups" and set(d.desired) <= set(d.actual or []):
                continue
            diffs.append(d)
        return diffs

    def apply(self, host: HostAdapter, current: Dict[str, Any], diffs: List[StateDiff]) -> None:
        if self.ensure == "absent":
            host.remove_user(self.name)
            return
        if current.get("ensure") == "absent":
            host.create_user(
                self.name,
                home=self.home,
                shell=self.shell,
                groups=self.groups,
                system=self.system,
            )
            return
        host.modify_user(self.name, **{d.field: d.desired for d in diffs})

    def autorequires(self) -> List[str]:
        return [make_id(Group.type_name, g) for g in (self.groups or [])]
