"""
Familia Darwin (macOS): paquetes y servicios con Homebrew, cuentas con
dscl / sysadminctl / dseditgroup.

brew services no distingue "habilitado" de "arrancado": un servicio
registrado (loaded) se considera habilitado.
"""

import json
from typing import Any, Dict, List, Optional

from jenkinsctl.platforms.base import SystemHost


class DarwinHost(SystemHost):
    name = "darwin"

    # Paquetes

    def package_version(self, name: str) -> Optional[str]:
        ok, out = self._query(["brew", "list", "--versions", name])
        parts = out.split()
        if not ok or len(parts) < 2:
            return None
        return parts[-1]

    def install_package(self, name: str, version: Optional[str] = None) -> None:
        target = f"{name}@{version}" if version else name
        self._run(["brew", "install", target])

    def remove_package(self, name: str) -> None:
        self._run(["brew", "uninstall", name])

    # Grupos

    def get_group(self, name: str) -> Optional[Dict[str, Any]]:
        ok, out = self._query(["dscl", ".", "-read", f"/Groups/{name}", "PrimaryGroupID"])
        if not ok:
            return None
        return {"name": name, "gid": out.split()[-1] if out.split() else None, "members": []}

    def create_group(self, name: str, system: bool = False) -> None:
        self._run(["dseditgroup", "-o", "create", name])

    def remove_group(self, name: str) -> None:
        self._run(["dseditgroup", "-o", "delete", name])

    # Usuarios

    def get_user(self, name: str) -> Optional[Dict[str, Any]]:
        ok, out = self._query(["dscl", ".", "-read", f"/Users/{name}", "NFSHomeDirectory", "UserShell"])
        if not ok:
            return None
        info: Dict[str, Any] = {"name": name, "home": None, "shell": None}
        for line in out.splitlines():
            key, _, value = line.partition(":")
            if key.strip() == "NFSHomeDirectory":
                info["home"] = value.strip()
            elif key.strip() == "UserShell":
                info["shell"] = value.strip()
        ok, groups_out = self._query(["id", "-Gn", name])
        info["groups"] = groups_out.split() if ok else []
        return info

    def create_user(
        self,
        name: str,
        home: Optional[str] = None,
        shell: Optional[str] = None,
        groups: Optional[List[str]] = None,
        system: bool = False,
    ) -> None:
        cmd = ["sysadminctl", "-addUser", name]
        if home:
            cmd += ["-home", home]
        if shell:
            cmd += ["-shell", shell]
        self._run(cmd)
        for group in groups or []:
            self._add_to_group(name, group)

    def modify_user(self, name: str, **fields: Any) -> None:
        if fields.get("home"):
            self._run(["dscl", ".", "-create", f"/Users/{name}", "NFSHomeDirectory", fields["home"]])
        if fields.get("shell"):
            self._run(["dscl", ".", "-create", f"/Users/{name}", "UserShell", fields["shell"]])
        for group in fields.get("groups") or []:
            self._add_to_group(name, group)

    def remove_user(self, name: str) -> None:
        self._run(["sysadminctl", "-deleteUser", name])

    def _add_to_group(self, user: str, group: str) -> None:
        self._run(["dseditgroup", "-o", "edit", "-a", user, "-t", "user", group])

    # Servicios (brew services)

    def service_status(self, name: str) -> Dict[str, bool]:
        ok, out = self._query(["brew", "services", "info", name, "--json"])
        if not ok or not out.strip():
            return {"running": False, "enabled": False}
        data = json.loads(out)
        info = data[0] if isinstance(data, list) and data else {}
        return {"running": bool(info.get("running")), "enabled": bool(info.get("loaded"))}

    def start_service(self, name: str) -> None:
        self._run(["brew", "services", "start", name])

    def stop_service(self, name: str) -> None:
        self._run(["brew", "services", "stop", name])

    def restart_service(self, name: str) -> None:
        self._run(["brew", "services", "restart", name])

    def enable_service(self, name: str) -> None:
        self._run(["brew", "services", "start", name])

    def disable_service(self, name: str) -> None:
        self._run(["brew", "services", "stop", name])
