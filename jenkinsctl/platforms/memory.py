"""
Host en memoria: implementa el contrato HostAdapter sin tocar el sistema.

Se usa en los tests y con --mock. Emula lo justo de un host real para que
el orden importe:
- chown a un usuario o grupo inexistente falla,
- un servicio sin paquete ni unidad no se puede arrancar,
- la CLI de Jenkins y la descarga de jenkins-cli.jar desde localhost
  fallan si Jenkins no está corriendo,
- arrancar Jenkins (re)escribe config.xml con su configuración actual.

Cada mutación queda registrada en `actions` para verificar efectos.
"""

import hashlib
import re
from typing import Any, Dict, List, Optional, Tuple

from converge.core.errors import ProviderError
from jenkinsctl.platforms.params import DEBIAN, PlatformParams

_PORT_RE = re.compile(r"JENKINS_PORT=(\d+)")

DEFAULT_SETTINGS = {"num_executors": "2", "agentagent_port": "-1"}


class MemoryHost:
    """Host falso en memoria."""

    name = "memory"

    def __init__(self, params: Optional[PlatformParams] = None):
        self.params = params or DEBIAN
        self.packages: Dict[str, str] = {}
        self.available_versions: Dict[str, str] = {}
        self.groups: Dict[str, Dict[str, Any]] = {"root": {"system": True}}
        self.users: Dict[str, Dict[str, Any]] = {
            "root": {"home": "/root", "shell": "/bin/bash", "groups": ["root"]},
        }
        self.files: Dict[str, Dict[str, Any]] = {
            "/": {"kind": "directory", "content": None, "mode": "0755", "owner": "root", "group": "root"},
        }
        self.services: Dict[str, Dict[str, bool]] = {}
        self.jenkins_settings: Dict[str, str] = dict(DEFAULT_SETTINGS)
        self.http_port: Optional[int] = None
        self.actions: List[Tuple[str, ...]] = []
        self._failures: Dict[Tuple[str, str], str] = {}

    # Utilidades de test

    def fail(self, operation: str, target: str, message: str = "fallo simulado") -> None:
        """Hace que la próxima `operation` sobre `target` lance ProviderError."""
        self._failures[(operation, target)] = message

    def _record(self, operation: str, target: str, *extra: str) -> None:
        message = self._failures.pop((operation, target), None)
        if message is not None:
            raise ProviderError(f"{operation} {target}: {message}")
        self.actions.append((operation, target) + tuple(extra))

    def actions_for(self, operation: str) -> List[Tuple[str, ...]]:
        return [a for a in self.actions if a[0] == operation]

    # Paquetes

    def package_version(self, name: str) -> Optional[str]:
        return self.packages.get(name)

    def install_package(self, name: str, version: Optional[str] = None) -> None:
        self._record("install_package", name, version or "")
        self.packages[name] = version or self.available_versions.get(name, "1.0.0")

    def remove_package(self, name: str) -> None:
        self._record("remove_package", name)
        self.packages.pop(name, None)

    # Grupos

    def get_group(self, name: str) -> Optional[Dict[str, Any]]:
        if name not in self.groups:
            return None
        members = sorted(u for u, info in self.users.items() if name in info["groups"])
        return {"name": name, "members": members}

    def create_group(self, name: str, system: bool = False) -> None:
        self._record("create_group", name)
        self.groups[name] = {"system": system}

    def remove_group(self, name: str) -> None:
        self._record("remove_group", name)
        self.groups.pop(name, None)

    # Usuarios

    def get_user(self, name: str) -> Optional[Dict[str, Any]]:
        info = self.users.get(name)
        if info is None:
            return None
        return {"name": name, "home": info["home"], "shell": info["shell"], "groups": list(info["groups"])}

    def create_user(
        self,
        name: str,
        home: Optional[str] = None,
        shell: Optional[str] = None,
        groups: Optional[List[str]] = None,
        system: bool = False,
    ) -> None:
        self._check_groups(groups or [])
        self._record("create_user", name)
        self.users[name] = {
            "home": home or f"/home/{name}",
            "shell": shell or "/bin/sh",
            "groups": list(groups or []),
        }

    def modify_user(self, name: str, **fields: Any) -> None:
        if name not in self.users:
            raise ProviderError(f"usermod: el usuario '{name}' no existe")
        self._check_groups(fields.get("groups") or [])
        self._record("modify_user", name, ",".join(sorted(fields)))
        info = self.users[name]
        for key in ("home", "shell"):
            if fields.get(key):
                info[key] = fields[key]
        for group in fields.get("groups") or []:
            if group not in info["groups"]:
                info["groups"].append(group)

    def remove_user(self, name: str) -> None:
        self._record("remove_user", name)
        self.users.pop(name, None)

    def _check_groups(self, groups: List[str]) -> None:
        for group in groups:
            if group not in self.groups:
                raise ProviderError(f"useradd: el grupo '{group}' no existe")

    # Ficheros

    def stat_file(self, path: str) -> Optional[Dict[str, Any]]:
        entry = self.files.get(path)
        if entry is None:
            return None
        return {k: v for k, v in entry.items() if k != "content"}

    def read_file(self, path: str) -> Optional[str]:
        entry = self.files.get(path)
        if entry is None:
            return None
        if entry["kind"] != "file":
            raise ProviderError(f"{path} no es un fichero")
        return entry["content"]

    def file_digest(self, path: str) -> Optional[str]:
        entry = self.files.get(path)
        if entry is None or entry["kind"] != "file":
            return None
        return hashlib.sha256((entry["content"] or "").encode("utf-8")).hexdigest()

    def write_file(
        self,
        path: str,
        content: str,
        mode: Optional[str] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        self._check_owner(path, owner, group)
        self._record("write_file", path)
        self._ensure_parents(path)
        previous = self.files.get(path, {})
        self.files[path] = {
            "kind": "file",
            "content": content,
            "mode": mode or previous.get("mode") or "0644",
            "owner": owner or previous.get("owner") or "root",
            "group": group or previous.get("group") or "root",
        }

    def make_directory(
        self,
        path: str,
        mode: Optional[str] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        self._check_owner(path, owner, group)
        self._record("make_directory", path)
        self._ensure_parents(path)
        self.files[path] = {
            "kind": "directory",
            "content": None,
            "mode": mode or "0755",
            "owner": owner or "root",
            "group": group or "root",
        }

    def set_file_attrs(
        self,
        path: str,
        mode: Optional[str] = None,
        owner: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        if path not in self.files:
            raise ProviderError(f"chmod: no existe {path}")
        self._check_owner(path, owner, group)
        self._record("set_file_attrs", path)
        entry = self.files[path]
        for key, value in (("mode", mode), ("owner", owner), ("group", group)):
            if value:
                entry[key] = value

    def remove_path(self, path: str) -> None:
        self._record("remove_path", path)
        prefix = path.rstrip("/") + "/"
        for existing in [p for p in self.files if p == path or p.startswith(prefix)]:
            del self.files[existing]

    def download(self, url: str, path: str) -> None:
        if url.startswith("http://localhost") and not self._jenkins_running():
            raise ProviderError(f"Error descargando {url}: Connection refused")
        self._record("download", path, url)
        self._ensure_parents(path)
        self.files[path] = {
            "kind": "file",
            "content": f"artifact from {url}",
            "mode": "0644",
            "owner": "root",
            "group": "root",
        }

    def _check_owner(self, path: str, owner: Optional[str], group: Optional[str]) -> None:
        if owner and owner not in self.users:
            raise ProviderError(f"chown {path}: usuario inválido '{owner}'")
        if group and group not in self.groups:
            raise ProviderError(f"chown {path}: grupo inválido '{group}'")

    def _ensure_parents(self, path: str) -> None:
        parts = path.strip("/").split("/")[:-1]
        current = ""
        for part in parts:
            current += "/" + part
            if current not in self.files:
                self.files[current] = {
                    "kind": "directory", "content": None, "mode": "0755", "owner": "root", "group": "root",
                }

    # Servicios

    def service_status(self, name: str) -> Dict[str, bool]:
        status = self.services.get(name, {})
        return {"running": bool(status.get("running")), "enabled": bool(status.get("enabled"))}

    def start_service(self, name: str) -> None:
        self._check_unit(name)
        self._record("start_service", name)
        self.services.setdefault(name, {})["running"] = True
        self._on_started(name)

    def stop_service(self, name: str) -> None:
        self._record("stop_service", name)
        self.services.setdefault(name, {})["running"] = False
        if name == self.params.service_name:
            self.http_port = None

    def restart_service(self, name: str) -> None:
        self._check_unit(name)
        self._record("restart_service", name)
        self.services.setdefault(name, {})["running"] = True
        self._on_started(name)

    def enable_service(self, name: str) -> None:
        self._check_unit(name)
        self._record("enable_service", name)
        self.services.setdefault(name, {})["enabled"] = True

    def disable_service(self, name: str) -> None:
        self._record("disable_service", name)
        self.services.setdefault(name, {})["enabled"] = False

    def _check_unit(self, name: str) -> None:
        known = (
            name in self.services
            or name in self.packages
            or (name == self.params.service_name and self.params.jenkins_package in self.packages)
            or f"/etc/systemd/system/{name}.service" in self.files
        )
        if not known:
            raise ProviderError(f"Unit {name}.service not found")

    # Emulación de Jenkins

    def _jenkins_running(self) -> bool:
        return self.service_status(self.params.service_name)["running"]

    def _on_started(self, name: str) -> None:
        if name != self.params.service_name:
            return
        self.http_port = 8080
        override = self.files.get(self.params.service_override)
        if override and override.get("content"):
            match = _PORT_RE.search(override["content"])
            if match:
                self.http_port = int(match.group(1))
        self._save_jenkins_config()

    def _save_jenkins_config(self) -> None:
        owner = "jenkins" if "jenkins" in self.users else "root"
        group = "jenkins" if "jenkins" in self.groups else "root"
        self._ensure_parents(self.params.config_xml)
        self.files[self.params.config_xml] = {
            "kind": "file",
            "content": render_config_xml(self.jenkins_settings),
            "mode": "0644",
            "owner": owner,
            "group": group,
        }

    def jenkins_cli(self, args: List[str]) -> str:
        if not self._jenkins_running():
            raise ProviderError("jenkins-cli: Connection refused")
        if self.params.cli_jar not in self.files:
            raise ProviderError(f"jenkins-cli: no existe {self.params.cli_jar}")
        if not args:
            raise ProviderError("jenkins-cli: falta el comando")
        command, rest = args[0], args[1:]
        action, _, key = command.partition("_")
        if action not in ("get", "set") or key not in self.jenkins_settings:
            raise ProviderError(f"jenkins-cli: comando desconocido {command}")
        if action == "get":
            return self.jenkins_settings[key] + "\n"
        if not rest:
            raise ProviderError(f"jenkins-cli: {command} requiere un valor")
        try:
            value = str(int(rest[0]))
        except ValueError as exc:
            raise ProviderError(f"jenkins-cli: valor inválido {rest[0]!r}") from exc
        self._record("jenkins_cli", command, value)
        self.jenkins_settings[key] = value
        self._save_jenkins_config()
        return ""

    def listening_ports(self) -> List[int]:
        if not self._jenkins_running() or self.http_port is None:
            return []
        ports = {self.http_port}
        agent_port = int(self.jenkins_settings.get("agentagent_port", "-1"))
        if agent_port > 0:
            ports.add(agent_port)
        return sorted(ports)


def render_config_xml(settings: Dict[str, str]) -> str:
    """config.xml tal como lo escribe Jenkins: agentagent_port se persiste como <slaveAgentPort>."""
    return (
        "<?xml version='1.1' encoding='UTF-8'?>\n"
        "<hudson>\n"
        f"  <numExecutors>{settings.get('num_executors', '2')}</numExecutors>\n"
        f"  <slaveAgentPort>{settings.get('agentagent_port', '-1')}</slaveAgentPort>\n"
        "</hudson>\n"
    )
